"""Fixed vocabularies shared by the store, the forms and the views."""

SHIFT_TYPES = {
    'day': 'Day',
    'night': 'Night',
    '12h': '12h shift',
    '24h': '24h shift',
}
DEFAULT_SHIFT_TYPE = 'day'

PAYMENT_STATUSES = {
    'pending': 'Pending',
    'received': 'Received',
}
DEFAULT_PAYMENT_STATUS = 'pending'

SPECIALTIES = [
    'General Practice',
    'Pediatrics',
    'Cardiology',
    'Orthopedics',
    'Neurology',
    'Gynecology',
    'Emergency',
    'ICU',
    'General Surgery',
    'Anesthesiology',
]

MONTH_NAMES = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December',
]
MONTH_ABBR = [m[:3] for m in MONTH_NAMES]

# Sunday-first, matching the calendar grid and the recurrence weekday numbers
DAY_NAMES = ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']

# Dashboard widgets show this many upcoming/recent shifts
DASHBOARD_LIST_SIZE = 5
RECENT_TRANSACTIONS_SIZE = 10
CHART_MONTHS = 6
