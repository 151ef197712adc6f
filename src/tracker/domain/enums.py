from enum import StrEnum

class SubscriptionTier(StrEnum):
    FREE = "free"
    MONTHLY = "monthly"
    LIFETIME = "lifetime"

class SubscriptionStatus(StrEnum):
    ACTIVE = "active"
    CANCELED = "canceled"
    PAST_DUE = "past_due"

class DateFormat(StrEnum):
    ISO = "ISO"
    US = "US"
    EU = "EU"
