class InvalidInputError(ValueError):
    """Raised for an enumerated input (role, filing status, frequency, time frame) outside its allowed values."""


class TaxConfigError(Exception):
    pass
