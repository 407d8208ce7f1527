import enum


class TargetCategory(str, enum.Enum):
    INFRASTRUCTURE = "infrastructure"
    EDUCATION = "education"
    HEALTH = "health"
    SECURITY = "security"
    ENVIRONMENT = "environment"
    CULTURE = "culture"
    SPORTS = "sports"
    TRANSPORTATION = "transportation"
    OTHER = "other"


class TargetStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    VOTING = "voting"
    APPROVED = "approved"
    REJECTED = "rejected"
    IMPLEMENTED = "implemented"
