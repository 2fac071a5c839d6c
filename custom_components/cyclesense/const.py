"""Constants for cyclesense."""

from logging import Logger, getLogger

LOGGER: Logger = getLogger(__package__)

DOMAIN = "cyclesense"
ATTRIBUTION = "Cycle data calculated locally"

CONF_LAST_PERIOD = "last_period_start"
CONF_PERIOD_LENGTH = "period_length"
CONF_SHOW_FERTILITY_ON_CAL = "show_fertility_on_calendar"

DEFAULT_CYCLE_LENGTH = 28
DEFAULT_PERIOD_LENGTH = 5

FLOW_LEVELS: tuple[str, ...] = ("light", "normal", "heavy")

# Medical reference ranges, in days
NORMAL_CYCLE_MIN = 21
NORMAL_CYCLE_MAX = 35
CONCERNING_CYCLE_MAX = 45
NORMAL_PERIOD_MIN = 2
NORMAL_PERIOD_MAX = 7
IRREGULARITY_THRESHOLD = 7
HIGH_VARIABILITY_THRESHOLD = 10

LUTEAL_PHASE_DAYS = 14
OVULATION_PHASE_MARGIN = 2
FERTILE_DAYS_BEFORE_OVULATION = 5
FERTILE_DAYS_AFTER_OVULATION = 1

MAX_PREDICTION_CYCLES = 6
MIN_HEALTH_PERIODS = 3
