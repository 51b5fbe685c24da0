class LeadError(Exception):
    """Base class for lead storage errors"""


class LeadNotFoundError(LeadError):
    """The lead does not exist or belongs to another user"""


class DuplicateLeadError(LeadError):
    """The owner already has a lead with this email"""


class LeadPersistenceError(LeadError):
    """The store failed for a reason the caller cannot fix"""
