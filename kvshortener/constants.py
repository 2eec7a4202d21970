# Code length used when settings:last_length has never been written
DEFAULT_CODE_LENGTH = 4

# Registrar retry budget and the iteration at which the code length grows.
# With these values the growth fires at most once per call.
MAX_TRIALS = 80
LENGTH_GROWTH_TRIALS = 50

# 64 symbols: a-z A-Z 0-9 - _
CODE_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_"
CODE_PATTERN = r"[-_A-Za-z0-9]{4,}"

# Rolling windows in nanoseconds (leap seconds ignored)
NANOS_PER_SECOND = 1_000_000_000
DAY_NANOS = 24 * 60 * 60 * NANOS_PER_SECOND  # 86_400_000_000_000
WEEK_NANOS = 7 * DAY_NANOS
