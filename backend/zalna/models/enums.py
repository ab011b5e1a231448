import enum


class HallStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class HallUserRoleType(str, enum.Enum):
    OWNER = "OWNER"
    MANAGER = "MANAGER"
    RECEPTIONIST = "RECEPTIONIST"
    ACCOUNTANT = "ACCOUNTANT"


class BillingUnit(str, enum.Enum):
    EVENT = "EVENT"
    HOUR = "HOUR"
    DAY = "DAY"


class PricingModel(str, enum.Enum):
    FIXED_EVENT = "FIXED_EVENT"
    PER_PERSON = "PER_PERSON"
    PER_PACK = "PER_PACK"


class MediaType(str, enum.Enum):
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"
    DOCUMENT = "DOCUMENT"


class UserRole(str, enum.Enum):
    CLIENT = "CLIENT"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


class HostApplicationStatus(str, enum.Enum):
    NEW = "NEW"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
