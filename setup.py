#!/usr/bin/env python
# -*- coding: utf-8 -*-

from setuptools import setup

readme = open('README.rst').read()
version = (0, 1, 0)

setup(
    name='mensura',
    python_requires=">=3.10",
    version=".".join(map(str, version)),
    description='Rhythmic notation engine: exact durations, metres and self-correcting bars',
    long_description=readme,
    long_description_content_type='text/x-rst',
    packages=[
        'mensura',
        'mensura.rhythm',
    ],
    install_requires=[
        "quicktions",

        # Own libraries
        "configdict>=2.10.0",
    ],
    extras_require={
        'test': ['pytest<9'],
    },
    license="LGPLv2",
    zip_safe=False,
    classifiers=[
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Multimedia :: Sound/Audio'
    ],
)
