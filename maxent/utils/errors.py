#!filepath: maxent/utils/errors.py


class ConfigurationError(ValueError):
    """
    Raised for invalid training configuration (load factor, algorithm name,
    parameter values, an event stream with no usable events).
    Always raised before any numerical work starts.
    """


class StructuralError(RuntimeError):
    """
    Raised when a data structure cannot be built or restored:
    duplicate IndexTable keys, unregistered artifact section kinds.
    """


class InvalidFormatError(StructuralError):
    """
    Raised for malformed persisted data (missing manifest, broken sections,
    unparsable event lines).
    """
