import configdict

config = configdict.CheckedDict()
config.addKey('searchMaxStates', 200000, type=int, range=(1000, 10**8),
              doc='Max. number of partial solutions expanded when respelling the rests '
                  'of a bar. Exceeding it raises NoSpellingFound')
config.addKey('logSearch', False, type=bool,
              doc='Log statistics about the respelling search at debug level')
config.addKey('spacingShortestValue', 8, type=int, choices=(1, 2, 4, 8, 16, 32, 64, 128, 256),
              doc='The note value (4=quarter, 8=eighth, ...) used as the shortest duration '
                  'of a bar when calculating relative spacing, if no shorter duration is present')

config.load()
