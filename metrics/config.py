"""Configuration constants for metrics computation."""

# HR zone upper boundaries as fractions of max HR
# Z1: < z2
# Z2: z2 - z3
# Z3: z3 - z4
# Z4: z4 - z5
# Z5: z5 - 95%
# Z6: >= 95% (catch-all)
DEFAULT_ZONE_BOUNDARIES = {
    "z2": 0.75,
    "z3": 0.85,
    "z4": 0.90,
    "z5": 0.95,
}
DEFAULT_HR_MAX = 190
Z6_THRESHOLD = 0.95
ZONE_COUNT = 6

# Resting HR used by the HR-reserve based load estimate
DEFAULT_RESTING_HR = 50

# Detailed records are sampled at ~1 Hz
SAMPLE_INTERVAL_SECONDS = 1

# Aggregation windows
WEEKLY_WINDOW_MONTHS = 6
ZONE_WINDOW_DAYS = 28
SUMMARY_WINDOWS_DAYS = (7, 28)

# Normalized Power rolling window (samples)
NP_WINDOW = 30

# FTP estimation from best efforts (samples at 1 Hz)
FTP_WINDOW_20MIN = 1200
FTP_WINDOW_5MIN = 300
FTP_FACTOR_20MIN = 0.95  # FTP ≈ 95% of best 20-min power
FTP_FACTOR_5MIN = 0.76  # FTP ≈ 76% of best 5-min power

# Intensity Factor categories (upper bound, label), first match wins
IF_CATEGORIES = [
    (0.65, "Recovery"),
    (0.75, "Endurance"),
    (0.85, "Tempo"),
    (0.95, "Threshold"),
    (1.05, "VO2 Max"),
]
IF_CATEGORY_MAX = "Anaerobic"

# Training Stress Score categories (upper bound, label)
TSS_CATEGORIES = [
    (150, "Low"),
    (300, "Medium"),
    (450, "High"),
]
TSS_CATEGORY_MAX = "Very High"

# Plausible sample ranges applied when normalizing streams
HR_SAMPLE_RANGE = (0, 250)  # exclusive bpm
PACE_SAMPLE_RANGE = (0, 20)  # exclusive min/km

# Traffic light thresholds (weekly volume change, %)
VOLUME_INCREASE_RED = 30
VOLUME_INCREASE_YELLOW = 15
VOLUME_DECREASE_YELLOW = -40

# A long run covers more than this fraction of the weekly average
LONG_RUN_FRACTION = 0.5
LONG_RUN_MAX_PER_28D = 4
LONG_RUN_MIN_KM = 10
LONG_RIDE_MIN_KM = 30

# Power zones as fractions of FTP (upper bounds of Z1..Z5; Z6 above)
POWER_ZONE_BOUNDARIES = (0.55, 0.75, 0.90, 1.05, 1.20)

# Effort categories
CATEGORY_EASY = "Z2"
CATEGORY_INTENSITY = "Intensity Effort"
CATEGORY_RACE = "Race Effort"
CATEGORY_MIXED = "Mixed Effort"

# Classification from zone percentages
EASY_MIN_PCT = 75  # Z1+Z2 share for an easy session
EASY_MAX_ABOVE_Z4_PCT = 5
RACE_MIN_PCT = 80  # Z5+Z6
INTENSITY_MIN_PCT = 80  # Z3+Z4+Z5
TENDENCY_MIN_PCT = 30

# Recovery traffic light (last 7 days)
RECOVERY_HARD_RED = 4
RECOVERY_HARD_YELLOW = 3
RECOVERY_BUSY_WEEK = 6
RECOVERY_EASY_SHARE = 0.6

# Intensity distribution traffic light (last 28 days, % of sessions)
INTENSITY_RED = (50, 40)  # easy below, hard above
INTENSITY_YELLOW = (60, 30)
INTENSITY_POLARIZED_PCT = 75

# Race effort traffic light
RACE_WEEK_RED = 3
RACE_FORTNIGHT_YELLOW = 4
RACE_MONTH_MAX = 3
