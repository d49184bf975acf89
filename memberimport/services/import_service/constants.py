"""Constants and the target field catalog for member imports."""

from enum import Enum
from typing import NamedTuple

# Maximum rows per import batch (safety limit for MongoDB 16MB doc size)
MAX_ROWS = 5000

# Rows returned in upload/preview responses
PREVIEW_ROWS = 5

CSV_EXTENSIONS = {"csv"}
WORKBOOK_EXTENSIONS = {"xlsx", "xls"}
ALLOWED_EXTENSIONS = CSV_EXTENSIONS | WORKBOOK_EXTENSIONS


class FieldKind(str, Enum):
    """How a target field participates in mapping and validation."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    SYNTHETIC = "synthetic"


class FieldDescriptor(NamedTuple):
    key: str
    label: str
    kind: FieldKind
    description: str = ""


FULL_NAME_FIELD = "fullName"

FIELD_CATALOG: tuple[FieldDescriptor, ...] = (
    # Required
    FieldDescriptor("firstName", "First Name", FieldKind.REQUIRED),
    FieldDescriptor("lastName", "Last Name", FieldKind.REQUIRED),
    # Contact
    FieldDescriptor("middleName", "Middle Name", FieldKind.OPTIONAL),
    FieldDescriptor("email", "Email Address", FieldKind.OPTIONAL),
    FieldDescriptor("phoneNumber", "Phone Number", FieldKind.OPTIONAL),
    FieldDescriptor("alternativeEmail", "Alternative Email", FieldKind.OPTIONAL),
    FieldDescriptor("alternatePhone", "Alternative Phone", FieldKind.OPTIONAL),
    FieldDescriptor("address", "Address", FieldKind.OPTIONAL),
    FieldDescriptor("city", "City", FieldKind.OPTIONAL),
    FieldDescriptor("state", "State/Province", FieldKind.OPTIONAL),
    FieldDescriptor("postalCode", "Postal Code", FieldKind.OPTIONAL),
    FieldDescriptor("country", "Country", FieldKind.OPTIONAL),
    # Demographic
    FieldDescriptor("dateOfBirth", "Date of Birth", FieldKind.OPTIONAL),
    FieldDescriptor("gender", "Gender", FieldKind.OPTIONAL),
    FieldDescriptor("maritalStatus", "Marital Status", FieldKind.OPTIONAL),
    FieldDescriptor("occupation", "Occupation", FieldKind.OPTIONAL),
    FieldDescriptor("employerName", "Employer Name", FieldKind.OPTIONAL),
    FieldDescriptor("education", "Education", FieldKind.OPTIONAL),
    # Membership
    FieldDescriptor("membershipStatus", "Membership Status", FieldKind.OPTIONAL),
    FieldDescriptor("membershipType", "Membership Type", FieldKind.OPTIONAL),
    FieldDescriptor("membershipDate", "Membership Date", FieldKind.OPTIONAL),
    FieldDescriptor("baptismDate", "Baptism Date", FieldKind.OPTIONAL),
    FieldDescriptor("baptismLocation", "Baptism Location", FieldKind.OPTIONAL),
    FieldDescriptor("confirmationDate", "Confirmation Date", FieldKind.OPTIONAL),
    FieldDescriptor("salvationDate", "Salvation Date", FieldKind.OPTIONAL),
    FieldDescriptor("notes", "Notes", FieldKind.OPTIONAL),
    # Emergency contact and family
    FieldDescriptor("emergencyContactName", "Emergency Contact Name", FieldKind.OPTIONAL),
    FieldDescriptor("emergencyContactPhone", "Emergency Contact Phone", FieldKind.OPTIONAL),
    FieldDescriptor("emergencyContactRelation", "Emergency Contact Relation", FieldKind.OPTIONAL),
    FieldDescriptor("fatherName", "Father Name", FieldKind.OPTIONAL),
    FieldDescriptor("motherName", "Mother Name", FieldKind.OPTIONAL),
    FieldDescriptor("fatherOccupation", "Father Occupation", FieldKind.OPTIONAL),
    FieldDescriptor("motherOccupation", "Mother Occupation", FieldKind.OPTIONAL),
    # Synthetic
    FieldDescriptor(
        FULL_NAME_FIELD,
        "Full Name (Split to First & Last)",
        FieldKind.SYNTHETIC,
        "Automatically splits full name into first, middle and last name",
    ),
)

FIELDS_BY_KEY: dict[str, FieldDescriptor] = {f.key: f for f in FIELD_CATALOG}

VALID_MEMBER_FIELDS = frozenset(FIELDS_BY_KEY)

REQUIRED_FIELDS: tuple[FieldDescriptor, ...] = tuple(
    f for f in FIELD_CATALOG if f.kind is FieldKind.REQUIRED
)

# Coded values the member API expects in upper case (MALE, SINGLE, ...)
ENUMERATED_FIELDS = frozenset({"gender", "maritalStatus", "membershipStatus", "membershipType"})

# Reference layout for the downloadable template
TEMPLATE_HEADERS = [
    "firstName", "lastName", "middleName", "email", "phoneNumber", "address",
    "city", "dateOfBirth", "gender", "maritalStatus", "occupation", "membershipStatus",
]

TEMPLATE_ROWS = [
    [
        "John", "Doe", "Michael", "john.doe@email.com", "+1234567890", "123 Main St",
        "Anytown", "1990-01-15", "MALE", "SINGLE", "Engineer", "MEMBER",
    ],
    [
        "Jane", "Smith", "", "jane.smith@email.com", "+1234567891", "456 Oak Ave",
        "Somewhere", "1985-05-20", "FEMALE", "MARRIED", "Teacher", "ACTIVE_MEMBER",
    ],
]
