"""Exception hierarchy raised while recording Swagger documents."""


class SwaggerRecorderError(Exception):
    """Base class for every error raised by swagger-recorder."""


class UnsupportedVersionError(SwaggerRecorderError):
    """The document is not a Swagger 2.0 document."""


class AccumulationError(SwaggerRecorderError):
    """A single observation could not be folded into the document."""


class UnsupportedMethodError(AccumulationError):
    """The request method has no Swagger 2.0 operation slot."""


class BodyDecodeError(AccumulationError):
    """A body declared as JSON is not valid JSON."""


class SchemaError(AccumulationError):
    """Base class for schema inference and merge failures."""


class UnsupportedValueTypeError(SchemaError):
    """A decoded value has no JSON Schema mapping."""


class TypeMismatchError(SchemaError):
    """Two schemas with different ``type`` tags cannot be merged."""


class MissingRequiredKeyError(SchemaError):
    """A jointly required key is missing from one side's properties."""
