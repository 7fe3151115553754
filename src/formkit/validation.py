"""Server-side validation of submitted form data.

Rules are plain strings (``required``, ``max:255``, ``in:a,b``) derived from
field configuration plus the rules declared on each field. Every field is
checked and all errors are returned together; hidden fields are skipped.

Values are parsed with pydantic type adapters: ``EmailStr``, ``HttpUrl``,
``FiniteFloat``, ``Decimal`` and the date and time types.
"""

import logging
import re
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from pathlib import PurePosixPath
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import EmailStr, FiniteFloat, HttpUrl, TypeAdapter, ValidationError

from .consts import (
    COLOR_PATTERNS,
    DEFAULT_TEXT_MAX_LENGTH,
    DEFAULT_TEXTAREA_MAX_LENGTH,
    MIME_EXTENSIONS,
    WILDCARD_MIMES,
)
from .context import RenderContext
from .errors import ValidationFailure
from .fields import (
    Builder,
    Checkbox,
    CheckboxList,
    CodeEditor,
    ColorPicker,
    DatePicker,
    DateRangePicker,
    DateTimePicker,
    Field,
    FileUpload,
    IconPicker,
    KeyValue,
    MarkdownEditor,
    NumberField,
    PinInput,
    Radio,
    RateInput,
    Repeater,
    RichEditor,
    Select,
    Slider,
    TagsInput,
    Textarea,
    TextInput,
    TimePicker,
    Toggle,
    ToggleButtons,
)
from .functions import FunctionRegistry
from .options import StaticOptions, normalize_options
from .schema import Schema, iter_leaves
from .state import FormState
from .utils import is_blank, unique

logger = logging.getLogger(__name__)

MESSAGES = {
    "required": "The {attribute} field is required.",
    "string": "The {attribute} field must be a string.",
    "email": "The {attribute} field must be a valid email address.",
    "url": "The {attribute} field must be a valid URL.",
    "numeric": "The {attribute} field must be a number.",
    "integer": "The {attribute} field must be an integer.",
    "boolean": "The {attribute} field must be true or false.",
    "array": "The {attribute} field must be an array.",
    "min": "The {attribute} field must be at least {param}.",
    "max": "The {attribute} field must not be greater than {param}.",
    "size": "The {attribute} field must be {param}.",
    "digits": "The {attribute} field must be {param} digits.",
    "alpha_num": "The {attribute} field must only contain letters and numbers.",
    "multiple_of": "The {attribute} field must be a multiple of {param}.",
    "in": "The selected {attribute} is invalid.",
    "regex": "The {attribute} field format is invalid.",
    "color": "The {attribute} field must be a valid {param} color.",
    "date": "The {attribute} field must be a valid date.",
    "time": "The {attribute} field must be a valid time.",
    "date_range": "The {attribute} field must be a valid date range.",
    "after_or_equal": "The {attribute} field must be a date after or equal to {param}.",
    "before_or_equal": "The {attribute} field must be a date before or equal to {param}.",
    "file": "The {attribute} field must be a file.",
    "mimes": "The {attribute} field must be a file of type: {param}.",
}

_NUMBER = TypeAdapter(FiniteFloat)
_DECIMAL = TypeAdapter(Decimal)
_DATETIME = TypeAdapter(datetime)
_DATE = TypeAdapter(date)
_TIME = TypeAdapter(time)
_URL = TypeAdapter(HttpUrl)
_EMAIL = TypeAdapter(EmailStr)

Moment = Union[datetime, time]


def _parse(adapter: TypeAdapter, value: Any) -> Any:
    """``adapter``'s value for ``value``, or None when pydantic rejects it."""
    if isinstance(value, str):
        value = value.strip()
    try:
        return adapter.validate_python(value)
    except ValidationError:
        return None


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    return _parse(_NUMBER, value)


def _as_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    number = _parse(_DECIMAL, str(value))
    return number if number is not None and number.is_finite() else None


def _as_moment(value: Any) -> Optional[Moment]:
    """Naive datetime (dates at midnight) or naive time; offsets are dropped.

    Numbers, numeric strings included, are never read as timestamps.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, time):
        return value.replace(tzinfo=None)
    if not isinstance(value, str) or _as_number(value) is not None:
        return None

    parsed = _parse(_DATETIME, value)
    if parsed is not None:
        return parsed.replace(tzinfo=None)
    day = _parse(_DATE, value)
    if day is not None:
        return datetime.combine(day, time())
    moment = _parse(_TIME, value)
    return moment.replace(tzinfo=None) if moment is not None else None


def _range_ends(value: Any) -> Optional[List[Any]]:
    if isinstance(value, Mapping):
        return [value.get("start"), value.get("end")]
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return list(value)
    return None


def _compare(value: Any, bound: str, later: bool) -> bool:
    """Every date in ``value`` (a single date or a range) lies on the right side of ``bound``."""
    limit = _as_moment(bound)
    for item in _range_ends(value) or [value]:
        current = _as_moment(item)
        if current is None or limit is None or type(current) is not type(limit):
            continue
        if (current < limit) if later else (current > limit):
            return False
    return True


def _size(value: Any, rules: List[str]) -> Optional[float]:
    """Measure a value the way min/max/size rules compare it.

    Numbers by value, strings by length, arrays by count, files by KB.
    """
    if "file" in rules:
        if isinstance(value, dict) and _as_number(value.get("size")) is not None:
            return _as_number(value["size"]) / 1024
        return None
    if "numeric" in rules or "integer" in rules:
        return _as_number(value)
    if isinstance(value, (str, list, tuple, dict)):
        return float(len(value))
    return _as_number(value)


def _file_name(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return value.get("name") or value.get("path")
    return None


def _extensions(accepted: List[str]) -> List[str]:
    extensions = []
    for mime in accepted:
        if mime in WILDCARD_MIMES:
            extensions.extend(WILDCARD_MIMES[mime])
        elif mime in MIME_EXTENSIONS:
            extensions.append(MIME_EXTENSIONS[mime])
        elif mime.startswith("."):
            extensions.append(mime[1:])
        elif "/" in mime:
            extensions.append(mime.split("/", 1)[1])
        else:
            extensions.append(mime)
    return unique(e.lower() for e in extensions)


def _items_rules(field, rules: List[str]) -> List[str]:
    if getattr(field, "min_items", None) is not None:
        rules.append(f"min:{field.min_items}")
    if getattr(field, "max_items", None) is not None:
        rules.append(f"max:{field.max_items}")
    return rules


class FormValidator:
    def __init__(self, functions: Optional[FunctionRegistry] = None):
        self.functions = functions if functions is not None else FunctionRegistry()
        self._checks: Dict[str, Callable[[Any, str, List[str]], bool]] = {
            "string": lambda v, p, r: isinstance(v, str),
            "email": lambda v, p, r: isinstance(v, str) and _parse(_EMAIL, v) is not None,
            "url": lambda v, p, r: isinstance(v, str) and _parse(_URL, v) is not None,
            "numeric": lambda v, p, r: _as_number(v) is not None,
            "integer": self._check_integer,
            "boolean": lambda v, p, r: v in (True, False, 0, 1, "0", "1"),
            "array": lambda v, p, r: isinstance(v, (list, dict)),
            "min": self._check_min,
            "max": self._check_max,
            "size": self._check_size,
            "digits": self._check_digits,
            "alpha_num": lambda v, p, r: isinstance(v, str) and v.isalnum(),
            "multiple_of": self._check_multiple_of,
            "in": self._check_in,
            "regex": self._check_regex,
            "color": self._check_color,
            "date": lambda v, p, r: isinstance(_as_moment(v), datetime),
            "time": lambda v, p, r: isinstance(_as_moment(v), time),
            "date_range": self._check_date_range,
            "after_or_equal": lambda v, p, r: _compare(v, p, later=True),
            "before_or_equal": lambda v, p, r: _compare(v, p, later=False),
            "file": lambda v, p, r: _file_name(v) is not None,
            "mimes": self._check_mimes,
        }

    # ------------------------------------------------------------------ rules

    def rules_for(self, field: Field, ctx: Optional[RenderContext] = None) -> List[str]:
        required = field.is_required(ctx) if ctx is not None else field.required is True
        rules = ["required" if required else "nullable"]
        rules.extend(self._kind_rules(field))
        rules.extend(rule for rule in field.rules if rule != "required")
        return unique(rules)

    def get_rules(self, schema: Schema, state: Optional[FormState] = None) -> Dict[str, List[str]]:
        """Rule strings per field path; repeater items use ``name.*.child``."""
        ctx = self._context(state) if state is not None else None
        rules = {}
        for leaf in schema.leaf_fields():
            rules[leaf.name] = self.rules_for(leaf, ctx)
            if isinstance(leaf, Repeater):
                for child in iter_leaves(leaf.components):
                    rules[f"{leaf.name}.*.{child.name}"] = self.rules_for(child)
        return rules

    def get_messages(self, schema: Schema) -> Dict[str, str]:
        messages = {}
        for leaf in schema.leaf_fields():
            for rule, message in leaf.validation_messages.items():
                messages[f"{leaf.name}.{rule}"] = message
        return messages

    def _kind_rules(self, field: Field) -> List[str]:
        if isinstance(field, TextInput):
            rules = {"email": ["email"], "url": ["url"], "number": ["numeric"]}.get(
                field.input_type, ["string"]
            )
            if field.min_length is not None:
                rules.append(f"min:{field.min_length}")
            if field.input_type != "number":
                rules.append(f"max:{field.max_length or DEFAULT_TEXT_MAX_LENGTH}")
            if field.pattern:
                rules.append(f"regex:{field.pattern}")
            return rules

        if isinstance(field, Textarea):
            return ["string", f"max:{field.max_length or DEFAULT_TEXTAREA_MAX_LENGTH}"]

        if isinstance(field, MarkdownEditor):
            return ["string"] + ([f"max:{field.max_length}"] if field.max_length else [])

        if isinstance(field, CodeEditor):
            return ["string"]

        if isinstance(field, RichEditor):
            return ["array"] if field.json_ else ["string"]

        if isinstance(field, NumberField):
            rules = ["numeric"]
            if field.step is not None and float(field.step).is_integer():
                rules.append("integer")
            if field.min is not None:
                rules.append(f"min:{field.min:g}")
            if field.max is not None:
                rules.append(f"max:{field.max:g}")
            return rules

        if isinstance(field, Slider):
            rules = ["numeric", f"min:{field.min:g}", f"max:{field.max:g}"]
            # steps count from zero, so they only line up with a min on the grid
            if _as_decimal(field.min) % _as_decimal(field.step) == 0:
                rules.append(f"multiple_of:{field.step:g}")
            return rules

        if isinstance(field, RateInput):
            rules = ["numeric", "min:0", f"max:{field.max_rating}"]
            rules.append("multiple_of:0.5" if field.allow_half else "integer")
            return rules

        if isinstance(field, PinInput):
            if field.pin_type == "numeric":
                return ["string", f"digits:{field.length}"]
            return ["string", "alpha_num", f"size:{field.length}"]

        if isinstance(field, (Toggle, Checkbox)):
            on, off = (
                (field.on_value, field.off_value)
                if isinstance(field, Toggle)
                else (field.checked_value, field.unchecked_value)
            )
            return ["boolean"] if isinstance(on, bool) and isinstance(off, bool) else []

        if isinstance(field, (Select, Radio, CheckboxList, ToggleButtons)):
            rules = []
            if isinstance(field, CheckboxList) or getattr(field, "multiple", False):
                rules = _items_rules(field, ["array"])
            if isinstance(field.options, StaticOptions):
                values = [option.value for option in normalize_options(field.options.items)]
                if values:
                    rules.append("in:" + ",".join(values))
            return rules

        if isinstance(field, IconPicker):
            return ["string", "in:" + ",".join(field.icons)] if field.icons else ["string"]

        if isinstance(field, ColorPicker):
            rules = _items_rules(field, ["array"]) if field.multiple else ["string"]
            rules.append(f"color:{field.format}")
            return rules

        if isinstance(field, (TagsInput, KeyValue)):
            return ["array"]

        if isinstance(field, (DatePicker, DateTimePicker, DateRangePicker)):
            if isinstance(field, DateTimePicker):
                lower, upper = field.min_date_time, field.max_date_time
            else:
                lower, upper = field.min_date, field.max_date
            rules = ["date_range" if isinstance(field, DateRangePicker) else "date"]
            if lower:
                rules.append(f"after_or_equal:{lower}")
            if upper:
                rules.append(f"before_or_equal:{upper}")
            return rules

        if isinstance(field, TimePicker):
            rules = ["time"]
            if field.min_time:
                rules.append(f"after_or_equal:{field.min_time}")
            if field.max_time:
                rules.append(f"before_or_equal:{field.max_time}")
            return rules

        if isinstance(field, FileUpload):
            if field.multiple:
                rules = ["array"]
                if field.max_files is not None:
                    rules.append(f"max:{field.max_files}")
                return rules
            rules = ["file"]
            if field.accepted_file_types:
                rules.append("mimes:" + ",".join(_extensions(field.accepted_file_types)))
            if field.max_size is not None:
                rules.append(f"max:{field.max_size}")
            return rules

        if isinstance(field, (Repeater, Builder)):
            return _items_rules(field, ["array"])

        return []

    # --------------------------------------------------------------- validate

    def validate(self, schema: Schema, data: Any) -> Dict[str, List[str]]:
        """Check ``data`` against every visible field; return errors per field path."""
        state = FormState.coerce(data)
        ctx = self._context(state)
        errors: Dict[str, List[str]] = {}

        for leaf in schema.leaf_fields():
            if leaf.is_hidden(ctx):
                continue
            value = state.get(leaf.name)
            self._check(leaf.name, value, self.rules_for(leaf, ctx), leaf, errors)

            if isinstance(leaf, Repeater) and isinstance(value, list):
                for index, item in enumerate(value):
                    item_ctx = self._context(FormState.coerce(item))
                    for child in iter_leaves(leaf.components):
                        if child.is_hidden(item_ctx):
                            continue
                        self._check(
                            f"{leaf.name}.{index}.{child.name}",
                            item_ctx.state.get(child.name),
                            self.rules_for(child, item_ctx),
                            child,
                            errors,
                        )

        return errors

    def validate_or_raise(self, schema: Schema, data: Any) -> None:
        errors = self.validate(schema, data)
        if errors:
            raise ValidationFailure(errors)

    def _context(self, state: FormState) -> RenderContext:
        return RenderContext(state=state, resolver=None, functions=self.functions)

    def _check(
        self, path: str, value: Any, rules: List[str], field: Field, errors: Dict[str, List[str]]
    ) -> None:
        if is_blank(value):
            if "required" in rules:
                errors.setdefault(path, []).append(self._message(field, "required", ""))
            return

        for rule in rules:
            name, _, param = rule.partition(":")
            if name in ("required", "nullable"):
                continue

            check = self._checks.get(name)
            if check is None:
                logger.debug(f"Skipping unsupported rule '{rule}' on field '{path}'")
                continue

            if not check(value, param, rules):
                errors.setdefault(path, []).append(self._message(field, name, param))

    def _message(self, field: Field, rule: str, param: str) -> str:
        template = field.validation_messages.get(rule) or MESSAGES.get(rule, "The {attribute} field is invalid.")
        return template.format(attribute=field.get_label().lower(), param=param)

    # ----------------------------------------------------------------- checks

    @staticmethod
    def _check_integer(value: Any, param: str, rules: List[str]) -> bool:
        number = _as_number(value)
        return number is not None and number.is_integer()

    @staticmethod
    def _check_min(value: Any, param: str, rules: List[str]) -> bool:
        size = _size(value, rules)
        limit = _as_number(param)
        return size is None or limit is None or size >= limit

    @staticmethod
    def _check_max(value: Any, param: str, rules: List[str]) -> bool:
        size = _size(value, rules)
        limit = _as_number(param)
        return size is None or limit is None or size <= limit

    @staticmethod
    def _check_size(value: Any, param: str, rules: List[str]) -> bool:
        size = _size(value, rules)
        return size is not None and size == _as_number(param)

    @staticmethod
    def _check_digits(value: Any, param: str, rules: List[str]) -> bool:
        text = str(value) if isinstance(value, int) and not isinstance(value, bool) else value
        return isinstance(text, str) and text.isdigit() and len(text) == int(param)

    @staticmethod
    def _check_multiple_of(value: Any, param: str, rules: List[str]) -> bool:
        number, step = _as_decimal(value), _as_decimal(param)
        if number is None:
            return False
        return step is None or step == 0 or number % step == 0

    @staticmethod
    def _check_in(value: Any, param: str, rules: List[str]) -> bool:
        allowed = set(param.split(","))
        values = value if isinstance(value, list) else [value]
        return all(str(v) in allowed for v in values if v is not None and v != "")

    @staticmethod
    def _check_regex(value: Any, param: str, rules: List[str]) -> bool:
        try:
            return isinstance(value, str) and re.search(param, value) is not None
        except re.error:
            logger.warning(f"Invalid regex rule pattern: {param!r}")
            return True

    @staticmethod
    def _check_color(value: Any, param: str, rules: List[str]) -> bool:
        pattern = COLOR_PATTERNS.get(param)
        if pattern is None:
            logger.warning(f"Unknown color format in rule: {param!r}")
            return True
        values = value if isinstance(value, list) else [value]
        return all(isinstance(v, str) and re.match(pattern, v.strip()) for v in values)

    @staticmethod
    def _check_date_range(value: Any, param: str, rules: List[str]) -> bool:
        ends = _range_ends(value)
        if ends is None:
            return False
        start, end = (_as_moment(end) for end in ends)
        return isinstance(start, datetime) and isinstance(end, datetime) and start <= end

    @staticmethod
    def _check_mimes(value: Any, param: str, rules: List[str]) -> bool:
        name = _file_name(value)
        if name is None:
            return False
        extension = PurePosixPath(name).suffix.lstrip(".").lower()
        return extension in param.split(",")
