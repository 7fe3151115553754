"""Exception definitions for formkit"""


class FormkitException(Exception):
    """Base exception for all formkit errors.

    All custom exceptions in formkit inherit from this class.
    Use this as a catch-all for formkit-specific errors when you don't need
    to handle specific exception types.
    """

    pass


class ConfigException(FormkitException):
    """Raised when configuration or schema definition is invalid.

    Use this exception when:
    - The configuration file cannot be found or fails validation
    - A schema contains an unknown field kind
    - Two leaf fields of one schema share a name
    - A computed option source declares no dependencies
    """

    pass


class SchemaNotFound(ConfigException):
    """Raised when a schema id is not present in the schema registry."""

    def __init__(self, schema_id: str):
        super().__init__(f"Schema not found: {schema_id}")
        self.schema_id = schema_id


class FieldNotFound(ConfigException):
    """Raised when a field name is not present in a schema."""

    def __init__(self, name: str):
        super().__init__(f"Field not found: {name}")
        self.name = name


class DuplicateFieldName(ConfigException):
    pass


class UnknownFunction(ConfigException):
    """Raised when a named function is not present in the function registry."""

    pass


class ResolutionError(FormkitException):
    """Raised inside option resolution when a source cannot be evaluated.

    This exception never escapes the option resolver: it is logged and the
    field degrades to an empty option list.
    """

    pass


class ValidationFailure(FormkitException):
    """Raised when submitted form data violates field rules.

    Carries every per-field error collected during one validation pass.
    """

    def __init__(self, errors: dict[str, list[str]]):
        super().__init__(f"Validation failed for {len(errors)} field(s)")
        self.errors = errors
