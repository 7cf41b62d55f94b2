from .inventory import Medicine, UsageEvent, MEDICINES, USAGE_EVENTS
from .clinics import Clinic, Patient, CLINICS, USERS
from .auth import AdminAccount, ADMINS, ROLES, ROLE_ADMIN, ROLE_SUPERADMIN

# Every sheet the workbook must contain, in sheet order
ALL_TABLES = (MEDICINES, USERS, USAGE_EVENTS, CLINICS, ADMINS)

__all__ = [
    'Medicine', 'UsageEvent', 'MEDICINES', 'USAGE_EVENTS',
    'Clinic', 'Patient', 'CLINICS', 'USERS',
    'AdminAccount', 'ADMINS', 'ROLES', 'ROLE_ADMIN', 'ROLE_SUPERADMIN',
    'ALL_TABLES',
]
