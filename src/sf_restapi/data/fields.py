import datetime
import typing
from typing_extensions import override

T = typing.TypeVar("T")

SALESFORCE_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%f%z"


class FieldConfigurableObject:
    """
    Holds platform-supplied records.

    Fields declared on the class as `Field` descriptors are revived and
    validated on assignment. Anything else the platform sends is kept,
    untouched, in `extra_fields` so new platform fields survive a
    round trip without being injected as attributes.
    """

    _fields: typing.ClassVar[dict[str, "Field"]] = {}
    _values: dict[str, typing.Any]
    extra_fields: dict[str, typing.Any]

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        cls._fields = {
            name: attr
            for klass in reversed(cls.__mro__)
            for name, attr in vars(klass).items()
            if isinstance(attr, Field)
        }

    def __init__(self, /, **fields):
        self._values = {}
        self.extra_fields = {}
        self.update_fields(fields)

    def update_fields(self, fields: typing.Mapping[str, typing.Any]):
        for name, value in fields.items():
            if name in self._fields:
                setattr(self, name, value)
            else:
                self.extra_fields[name] = value

    @classmethod
    def keys(cls) -> frozenset[str]:
        return frozenset(cls._fields.keys())

    def __getitem__(self, name: str):
        if name in self._fields:
            return getattr(self, name)
        if name in self.extra_fields:
            return self.extra_fields[name]
        raise KeyError(f"Undefined field {name} on object {type(self).__name__}")

    def __contains__(self, name: object):
        return name in self._values or name in self.extra_fields

    def get(self, name: str, default: typing.Any = None):
        try:
            return self[name]
        except KeyError:
            return default

    def to_dict(self) -> dict[str, typing.Any]:
        """Known fields formatted for the wire, followed by the extra fields"""
        return {
            **{
                name: self._fields[name].format(value)
                for name, value in self._values.items()
            },
            **self.extra_fields,
        }

    def __repr__(self):
        known = ", ".join(f"{name}={value!r}" for name, value in self._values.items())
        return f"{type(self).__name__}({known})"


class Field(typing.Generic[T]):
    _py_type: type[T] | None = None

    def __init__(self, py_type: type[T] | None = None):
        self._py_type = py_type

    def __set_name__(self, owner, name):
        self.__owner__ = owner
        self.__name__ = name

    @typing.overload
    def __get__(self, obj: None, objtype=None) -> "Field[T]": ...

    @typing.overload
    def __get__(self, obj: FieldConfigurableObject, objtype=None) -> T | None: ...

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return obj._values.get(self.__name__, None)

    def __set__(self, obj: FieldConfigurableObject, value: typing.Any):
        if value is not None:
            value = self.revive(value)
            self.validate(value)
        obj._values[self.__name__] = value

    def revive(self, value: typing.Any):
        return value

    def format(self, value: typing.Any) -> typing.Any:
        return value

    def validate(self, value):
        if self._py_type is not None and not isinstance(value, self._py_type):
            raise TypeError(
                f"Expected {self._py_type.__qualname__} for field {self.__name__} "
                f"on {self.__owner__.__name__}, got {type(value).__name__}"
            )


class TextField(Field[str]):
    def __init__(self):
        super().__init__(str)


class IdField(TextField):
    def validate(self, value):
        super().validate(value)
        if not value:
            raise ValueError(f"Field {self.__name__} cannot be an empty id")


class PicklistField(TextField):
    """
    Text restricted to `options`. An open picklist keeps values outside
    `options` as they are, for platform enumerations that grow over time.
    """

    options: tuple[str, ...]
    strict: bool

    def __init__(self, options: typing.Iterable[str], strict: bool = True):
        super().__init__()
        self.options = tuple(options)
        self.strict = strict

    def validate(self, value):
        super().validate(value)
        if self.strict and value not in self.options:
            raise ValueError(
                f"'{value}' is not a valid {self.__name__} "
                f"for {self.__owner__.__name__}; expected one of {self.options}"
            )


class IntField(Field[int]):
    def __init__(self):
        super().__init__(int)

    @override
    def revive(self, value: typing.Any):
        if isinstance(value, str):
            return int(value)
        return value


class NumberField(Field[float]):
    def __init__(self):
        super().__init__(float)

    @override
    def revive(self, value: typing.Any):
        if isinstance(value, (str, int)) and not isinstance(value, bool):
            return float(value)
        return value


class CheckboxField(Field[bool]):
    def __init__(self):
        super().__init__(bool)

    @override
    def revive(self, value: typing.Any):
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return value


class DateTimeField(Field[datetime.datetime]):
    def __init__(self):
        super().__init__(datetime.datetime)

    @override
    def revive(self, value: datetime.datetime | str):
        if isinstance(value, datetime.datetime):
            return value
        try:
            return datetime.datetime.fromisoformat(value)
        except ValueError:
            # "+0000" style offsets
            return datetime.datetime.strptime(value, SALESFORCE_DATETIME_FORMAT)

    def format(self, value: datetime.datetime):
        if value.tzinfo is None:
            value = value.astimezone()
        return value.isoformat(timespec="milliseconds")


class ListField(Field[list]):
    def __init__(self):
        super().__init__(list)
