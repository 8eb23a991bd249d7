MOOD_LABELS = {
    1: "Terrible",
    2: "Very Bad",
    3: "Bad",
    4: "Not Great",
    5: "Okay",
    6: "Good",
    7: "Great",
    8: "Excellent",
    9: "Amazing",
    10: "Perfect",
}
MOOD_EMOJIS = {
    1: "😭",
    2: "😢",
    3: "😞",
    4: "😕",
    5: "😐",
    6: "🙂",
    7: "😊",
    8: "😄",
    9: "😁",
    10: "🤩",
}
MOOD_COLORS = {
    "low": "#D95252",
    "mid": "#D9C979",
    "high": "#3772A6",
}

TASK_STATUSES = ["pending", "in_progress", "completed", "cancelled"]
TASK_STATUS_LABELS = {
    "pending": "Pending",
    "in_progress": "In progress",
    "completed": "Completed",
    "cancelled": "Cancelled",
}
PRIORITY_TAGS = ["low", "medium", "high", "urgent"]
PRIORITY_META = {
    "urgent": {"weight": 4, "color": "#B23A48"},
    "high": {"weight": 3, "color": "#D95252"},
    "medium": {"weight": 2, "color": "#D9C979"},
    "low": {"weight": 1, "color": "#8FB6D9"},
}

FINANCE_TYPES = ["expense", "income", "transfer"]
FINANCE_COLORS = {
    "income": "#4CAF50",
    "expense": "#D95252",
    "transfer": "#8FB6D9",
}

FOLDER_COLORS = [
    "blue", "green", "purple", "red", "yellow", "pink",
    "indigo", "gray", "orange", "teal", "cyan", "lime",
]
NOTE_COLORS = ["default", "blue", "green", "yellow", "pink", "purple"]

CALENDAR_VIEW_LABELS = {
    "month": "Month",
    "week": "Week",
    "day": "Day",
    "agenda": "Agenda",
}

WEATHER_UNITS = ["celsius", "fahrenheit"]
DEFAULT_WEATHER_SETTINGS = {
    "location": "London",
    "unit": "celsius",
    "showForecast": True,
    "showHourly": False,
    "autoRefresh": True,
    "refreshInterval": 30,
}

COMMON_TIMEZONES = [
    "UTC",
    "America/New_York",
    "America/Chicago",
    "America/Denver",
    "America/Los_Angeles",
    "America/Sao_Paulo",
    "Europe/London",
    "Europe/Paris",
    "Europe/Berlin",
    "Africa/Lagos",
    "Asia/Dubai",
    "Asia/Kolkata",
    "Asia/Singapore",
    "Asia/Tokyo",
    "Australia/Sydney",
]
