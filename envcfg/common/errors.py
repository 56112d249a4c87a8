from . import compat_typing as t


class EnvcfgError(Exception):
    """Base class of all errors raised by envcfg"""


class RegistrationError(EnvcfgError, TypeError):
    """A conversion function does not have the shape the registry requires"""


class DuplicateConversionError(RegistrationError):
    """A conversion function is already registered for the produced type"""


class RecordError(EnvcfgError, TypeError):
    """The populate target is not a mutable dataclass instance"""


class TagError(EnvcfgError, ValueError):
    """Field tags are inconsistent, e.g. defaults count differs from keys count"""


class ArityError(TagError):
    """Number of tagged keys differs from the arity of the field's conversion function"""


class ConversionError(EnvcfgError, ValueError):
    """A conversion function returned an error or raised an exception"""


class FieldError(EnvcfgError):
    """A problem with the value of one field, collected into a MultiError"""

    def __init__(self, message: str, record: str = '', field: str = '') -> None:
        super().__init__(message)
        self.record = record
        self.field = field


class MultiError(EnvcfgError):
    """Several independent errors found during one populate call

    The text lists every error, so that all of them can be fixed in one go:

    ::

        2 errors occurred:

        * no DB_URL value found, and AppConfig.db_url has no default
        * no conversion registered for type Secret (AppConfig.token)
    """

    def __init__(self, errors: t.Optional[t.Iterable[Exception]] = None) -> None:
        self.errors: t.List[Exception] = list(errors or [])
        super().__init__(self.errors)

    def __str__(self) -> str:
        if len(self.errors) == 1:
            head = '1 error occurred:'
        else:
            head = f'{len(self.errors)} errors occurred:'
        points = '\n'.join(f'* {e}' for e in self.errors)
        return f'{head}\n\n{points}'
