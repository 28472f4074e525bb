"""Member credential types enrolled on door devices."""

from enum import Enum


class CredentialType(str, Enum):
    """Physical or biometric credential presented at a door.

    String Enum:
        Inherits from str for easy serialization and database storage.
    """

    CARD = "card"
    FACE = "face"
    FINGERPRINT = "fingerprint"
    PIN = "pin"
