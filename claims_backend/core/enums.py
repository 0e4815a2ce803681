from enum import Enum


class Role(str, Enum):
    REGISTRY = "REGISTRY"
    COORDINATOR = "COORDINATOR"
    LECTURER = "LECTURER"


class ClaimStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ClaimType(str, Enum):
    TEACHING = "TEACHING"
    TRANSPORTATION = "TRANSPORTATION"
    THESIS_PROJECT = "THESIS_PROJECT"


class TransportType(str, Enum):
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


class ThesisType(str, Enum):
    SUPERVISION = "SUPERVISION"
    EXAMINATION = "EXAMINATION"


class SupervisionRank(str, Enum):
    PHD = "PHD"
    MPHIL = "MPHIL"
    MASTERS = "MASTERS"
    UNDERGRADUATE = "UNDERGRADUATE"
