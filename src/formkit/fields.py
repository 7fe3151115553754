"""Form field definitions.

Every node is a pydantic model. Capabilities that the frontend needs
(label, visibility, required/disabled predicates, validation, default value)
live on :class:`Field`; option-bearing kinds add an option source through
:class:`OptionsField`.

Predicates (``hidden``, ``visible``, ``required``, ``disabled``) accept a
bool, a callable taking ``(get, set)``, or the name of a registered function.
"""

import copy
import logging
from typing import Any, Callable, ClassVar, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field as PydanticField, field_validator, model_validator

from .consts import (
    ATTACHMENT_FILE_TYPES,
    ATTACHMENT_MAX_SIZE,
    DEFAULT_ICONS,
    DEFAULT_LIVE_DEBOUNCE,
    DEFAULT_SEARCH_DEBOUNCE,
    MARKDOWN_TOOLBAR_BUTTONS,
)
from .context import RenderContext
from .dependencies import dependencies_for
from .functions import FunctionRegistry
from .options import (
    ComputedOptions,
    OptionSource,
    RelationshipOptions,
    StaticOptions,
    coerce_option_source,
)
from .utils import label_from_name, unique

logger = logging.getLogger(__name__)

Predicate = Union[bool, str, Callable[..., Any]]
FunctionRef = Union[str, Callable[..., Any]]


class Component(BaseModel):
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra="forbid",
        populate_by_name=True,
    )

    kind: ClassVar[str] = "component"
    vue_component: ClassVar[str] = "Component"
    flutter_widget: ClassVar[str] = "LaraviltComponent"

    id: Optional[str] = None
    hidden: Predicate = False
    visible: Predicate = True
    column_span: Optional[Union[int, str]] = None

    def child_nodes(self) -> List["Component"]:
        return []

    def is_hidden(self, ctx: RenderContext) -> bool:
        if ctx.predicate(self.hidden, fallback=False):
            return True
        return not ctx.predicate(self.visible, fallback=True)

    def base_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "component": self.kind,
            "id": self.id,
            "hidden": self.is_hidden(ctx),
            "columnSpan": self.column_span,
        }

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {}

    def to_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {**self.base_props(ctx), **self.kind_props(ctx)}


class Field(Component):
    kind: ClassVar[str] = "field"

    name: str
    label: Optional[str] = None
    helper_text: Optional[str] = None
    placeholder: Optional[str] = None
    required: Predicate = False
    disabled: Predicate = False
    readonly: bool = False
    autofocus: bool = False
    autocomplete: Optional[str] = None
    tabindex: Optional[int] = None
    extra_attributes: Dict[str, Any] = PydanticField(default_factory=dict)
    reactive: bool = False
    live: bool = False
    lazy: bool = False
    live_debounce: Optional[int] = None
    after_state_updated: Optional[FunctionRef] = None
    default: Any = None
    rules: List[str] = PydanticField(default_factory=list)
    validation_messages: Dict[str, str] = PydanticField(default_factory=dict)

    def get_label(self) -> str:
        return self.label if self.label is not None else label_from_name(self.name)

    def is_required(self, ctx: RenderContext) -> bool:
        return ctx.predicate(self.required, fallback=False)

    def is_disabled(self, ctx: RenderContext) -> bool:
        return ctx.predicate(self.disabled, fallback=False)

    def is_reactive(self) -> bool:
        return self.reactive or self.live or self.lazy or self.after_state_updated is not None

    def validation_rules(self) -> List[str]:
        """Declared rules; a literal ``required=True`` adds the ``required`` rule."""
        rules = list(self.rules)
        if self.required is True and "required" not in rules:
            rules.insert(0, "required")
        return rules

    def default_value(self) -> Any:
        return copy.deepcopy(self.default)

    def current_value(self, ctx: RenderContext) -> Any:
        return ctx.value_of(self.name, self.default_value())

    def dependencies(self, functions: Optional[FunctionRegistry] = None) -> List[str]:
        return []

    def base_props(self, ctx: RenderContext) -> Dict[str, Any]:
        props = super().base_props(ctx)
        if self.live_debounce is not None:
            debounce = self.live_debounce
        else:
            debounce = DEFAULT_LIVE_DEBOUNCE if self.lazy else 0

        props.update(
            {
                "name": self.name,
                "type": self.kind,
                "label": self.get_label(),
                "helperText": self.helper_text,
                "placeholder": self.placeholder,
                "required": self.is_required(ctx),
                "disabled": self.is_disabled(ctx),
                "readonly": self.readonly,
                "autofocus": self.autofocus,
                "autocomplete": self.autocomplete,
                "tabindex": self.tabindex,
                "reactive": self.is_reactive(),
                "isLive": self.live,
                "isLazy": self.lazy,
                "liveDebounce": debounce,
                "validation": self.validation_rules(),
                "validationMessages": {
                    f"{self.name}.{rule}": message
                    for rule, message in self.validation_messages.items()
                },
                "defaultValue": self.default_value(),
                "value": self.current_value(ctx),
                "extraAttributes": dict(self.extra_attributes),
            }
        )
        return props


class OptionsField(Field):
    """Base for fields whose choices come from an option source."""

    kind: ClassVar[str] = "options-field"

    options: OptionSource = PydanticField(default_factory=StaticOptions)
    options_limit: Optional[int] = None
    depends_on: Optional[List[str]] = None
    disable_option_when: Optional[FunctionRef] = None

    @field_validator("options", mode="before")
    @classmethod
    def coerce_options(cls, value):
        return coerce_option_source(value)

    @property
    def has_dynamic_options(self) -> bool:
        return isinstance(self.options, ComputedOptions)

    @property
    def relationship(self) -> Optional[RelationshipOptions]:
        return self.options if isinstance(self.options, RelationshipOptions) else None

    def dependencies(self, functions: Optional[FunctionRegistry] = None) -> List[str]:
        if isinstance(self.options, ComputedOptions):
            return dependencies_for(self.options, functions, self.depends_on)
        return unique(self.depends_on or [])

    def options_props(self, ctx: RenderContext) -> Dict[str, Any]:
        resolved = ctx.resolver.resolve(self, ctx.state)
        props = {
            "options": resolved.to_list(),
            "hasMoreOptions": resolved.has_more,
            "optionsAreGrouped": resolved.grouped,
            "optionsLimit": self.options_limit or ctx.resolver.options_limit,
            "dependsOn": self.dependencies(ctx.functions),
            "hasDynamicOptions": self.has_dynamic_options,
        }
        if self.relationship is not None:
            props["relationship"] = self.relationship.entity
            props["titleAttribute"] = self.relationship.title_attribute
        return props


class TextInput(Field):
    kind: ClassVar[str] = "text-input"
    vue_component: ClassVar[str] = "TextInput"
    flutter_widget: ClassVar[str] = "LaraviltTextInput"

    input_type: str = "text"
    prefix: Optional[str] = None
    suffix: Optional[str] = None
    prefix_icon: Optional[str] = None
    suffix_icon: Optional[str] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    mask: Optional[str] = None
    show_character_count: bool = False
    step: Optional[float] = None
    revealable: bool = False

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "inputType": self.input_type,
            "prefixText": self.prefix,
            "suffixText": self.suffix,
            "prefixIcon": self.prefix_icon,
            "suffixIcon": self.suffix_icon,
            "minLength": self.min_length,
            "maxLength": self.max_length,
            "pattern": self.pattern,
            "mask": self.mask,
            "showCharacterCount": self.show_character_count,
            "step": self.step,
            "isRevealable": self.revealable,
        }


class Textarea(Field):
    kind: ClassVar[str] = "textarea"
    vue_component: ClassVar[str] = "Textarea"
    flutter_widget: ClassVar[str] = "LaraviltTextarea"

    rows: int = 3
    min_rows: Optional[int] = None
    max_rows: Optional[int] = None
    autosize: bool = False
    max_length: Optional[int] = None
    show_character_count: bool = False
    show_word_count: bool = False

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "rows": self.rows,
            "minRows": self.min_rows,
            "maxRows": self.max_rows,
            "autosize": self.autosize,
            "maxLength": self.max_length,
            "showCharacterCount": self.show_character_count,
            "showWordCount": self.show_word_count,
        }


class NumberField(Field):
    kind: ClassVar[str] = "number-field"
    vue_component: ClassVar[str] = "NumberField"
    flutter_widget: ClassVar[str] = "LaraviltNumberField"

    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    prefix: Optional[str] = None
    suffix: Optional[str] = None

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "min": self.min,
            "max": self.max,
            "step": self.step,
            "prefix": self.prefix,
            "suffix": self.suffix,
        }


class Toggle(Field):
    kind: ClassVar[str] = "toggle"
    vue_component: ClassVar[str] = "Toggle"
    flutter_widget: ClassVar[str] = "LaraviltToggle"

    on_value: Any = True
    off_value: Any = False
    on_label: Optional[str] = None
    off_label: Optional[str] = None
    inline: bool = False

    def default_value(self) -> Any:
        return self.off_value if self.default is None else copy.deepcopy(self.default)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "onValue": self.on_value,
            "offValue": self.off_value,
            "onLabel": self.on_label,
            "offLabel": self.off_label,
            "isOn": self.current_value(ctx) == self.on_value,
            "inline": self.inline,
        }


class Checkbox(Field):
    kind: ClassVar[str] = "checkbox"
    vue_component: ClassVar[str] = "Checkbox"
    flutter_widget: ClassVar[str] = "LaraviltCheckbox"

    checked_value: Any = True
    unchecked_value: Any = False
    description: Optional[str] = None
    inline: bool = False

    def default_value(self) -> Any:
        return self.unchecked_value if self.default is None else copy.deepcopy(self.default)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "checkedValue": self.checked_value,
            "uncheckedValue": self.unchecked_value,
            "description": self.description,
            "isChecked": self.current_value(ctx) == self.checked_value,
            "inline": self.inline,
        }


class Radio(OptionsField):
    kind: ClassVar[str] = "radio"
    vue_component: ClassVar[str] = "Radio"
    flutter_widget: ClassVar[str] = "LaraviltRadio"

    inline: bool = False
    descriptions: Dict[str, str] = PydanticField(default_factory=dict)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "inline": self.inline,
            "descriptions": {str(k): v for k, v in self.descriptions.items()},
            **self.options_props(ctx),
        }


class CheckboxList(OptionsField):
    kind: ClassVar[str] = "checkbox-list"
    vue_component: ClassVar[str] = "CheckboxList"
    flutter_widget: ClassVar[str] = "LaraviltCheckboxList"

    columns: int = 1
    bulk_toggleable: bool = False

    def default_value(self) -> Any:
        return [] if self.default is None else copy.deepcopy(self.default)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "columns": self.columns,
            "bulkToggleable": self.bulk_toggleable,
            "isCheckboxList": True,
            **self.options_props(ctx),
        }


class ToggleButtons(OptionsField):
    kind: ClassVar[str] = "toggle-buttons"
    vue_component: ClassVar[str] = "ToggleButtons"
    flutter_widget: ClassVar[str] = "LaraviltToggleButtons"

    multiple: bool = False
    inline: bool = True

    def default_value(self) -> Any:
        if self.default is None and self.multiple:
            return []
        return copy.deepcopy(self.default)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "multiple": self.multiple,
            "inline": self.inline,
            **self.options_props(ctx),
        }


class Select(OptionsField):
    kind: ClassVar[str] = "select"
    vue_component: ClassVar[str] = "Select"
    flutter_widget: ClassVar[str] = "LaraviltSelect"

    searchable: bool = False
    searchable_columns: List[str] = PydanticField(default_factory=list)
    multiple: bool = False
    native: bool = True
    preload: bool = False
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    loading_message: Optional[str] = None
    no_search_results_message: Optional[str] = None
    search_prompt: Optional[str] = None
    searching_message: Optional[str] = None
    search_debounce: int = DEFAULT_SEARCH_DEBOUNCE
    allow_html: bool = False
    wrap_option_labels: bool = True
    selectable_placeholder: bool = True
    options_url: Optional[str] = None
    create_option_form: List[Component] = PydanticField(default_factory=list)
    edit_option_form: List[Component] = PydanticField(default_factory=list)
    get_search_results_using: Optional[FunctionRef] = None
    get_option_label_using: Optional[FunctionRef] = None

    @model_validator(mode="after")
    def searchable_is_not_native(self) -> "Select":
        if (self.searchable or self.searchable_columns) and "native" not in self.model_fields_set:
            self.native = False
        if self.searchable_columns:
            self.searchable = True
        return self

    @classmethod
    def boolean(
        cls,
        name: str,
        true_label: str = "Yes",
        false_label: str = "No",
        placeholder: Optional[str] = "Select an option",
        **kwargs,
    ) -> "Select":
        return cls(
            name=name,
            options={1: true_label, 0: false_label},
            placeholder=placeholder,
            **kwargs,
        )

    def default_value(self) -> Any:
        if self.default is None and self.multiple:
            return []
        return copy.deepcopy(self.default)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        props = {
            "searchable": self.searchable,
            "searchableColumns": list(self.searchable_columns),
            "multiple": self.multiple,
            "native": self.native,
            "preload": self.preload,
            "minItems": self.min_items,
            "maxItems": self.max_items,
            "loadingMessage": self.loading_message,
            "noSearchResultsMessage": self.no_search_results_message,
            "searchPrompt": self.search_prompt,
            "searchingMessage": self.searching_message,
            "searchDebounce": self.search_debounce,
            "allowHtml": self.allow_html,
            "wrapOptionLabels": self.wrap_option_labels,
            "selectablePlaceholder": self.selectable_placeholder,
            "optionsUrl": self.options_url,
            "hasCreateOptionForm": bool(self.create_option_form),
            "hasEditOptionForm": bool(self.edit_option_form),
            "createOptionForm": [ctx.as_template().render(c) for c in self.create_option_form],
            "editOptionForm": [ctx.as_template().render(c) for c in self.edit_option_form],
        }
        props.update(self.options_props(ctx))

        if ctx.search_url and (self.searchable or self.has_dynamic_options):
            props["searchUrl"] = ctx.search_url
            props["fieldName"] = self.name
        return props


class TagsInput(Field):
    kind: ClassVar[str] = "tags-input"
    vue_component: ClassVar[str] = "TagsInput"
    flutter_widget: ClassVar[str] = "LaraviltTagsInput"

    separator: str = ","
    suggestions: List[str] = PydanticField(default_factory=list)

    def default_value(self) -> Any:
        return [] if self.default is None else copy.deepcopy(self.default)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {"separator": self.separator, "suggestions": list(self.suggestions)}


class KeyValue(Field):
    kind: ClassVar[str] = "key-value"
    vue_component: ClassVar[str] = "KeyValue"
    flutter_widget: ClassVar[str] = "LaraviltKeyValue"

    key_label: str = "Key"
    value_label: str = "Value"
    key_placeholder: Optional[str] = None
    value_placeholder: Optional[str] = None
    addable: bool = True
    deletable: bool = True
    reorderable: bool = False

    def default_value(self) -> Any:
        return {} if self.default is None else copy.deepcopy(self.default)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "keyLabel": self.key_label,
            "valueLabel": self.value_label,
            "keyPlaceholder": self.key_placeholder,
            "valuePlaceholder": self.value_placeholder,
            "addable": self.addable,
            "deletable": self.deletable,
            "reorderable": self.reorderable,
        }


class DatePicker(Field):
    kind: ClassVar[str] = "date-picker"
    vue_component: ClassVar[str] = "DatePicker"
    flutter_widget: ClassVar[str] = "LaraviltDatePicker"

    format: str = "Y-m-d"
    display_format: Optional[str] = None
    min_date: Optional[str] = None
    max_date: Optional[str] = None
    native: bool = True
    first_day_of_week: int = 1
    close_on_date_selection: bool = True
    timezone: Optional[str] = None

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "format": self.format,
            "displayFormat": self.display_format or self.format,
            "minDate": self.min_date,
            "maxDate": self.max_date,
            "native": self.native,
            "firstDayOfWeek": self.first_day_of_week,
            "closeOnDateSelection": self.close_on_date_selection,
            "timezone": self.timezone,
        }


class DateTimePicker(Field):
    kind: ClassVar[str] = "date-time-picker"
    vue_component: ClassVar[str] = "DateTimePicker"
    flutter_widget: ClassVar[str] = "LaraviltDateTimePicker"

    format_24_hour: bool = False
    step: int = 1  # minutes
    min_date_time: Optional[str] = None
    max_date_time: Optional[str] = None
    timezone: Optional[str] = None
    with_seconds: bool = False

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "format24Hour": self.format_24_hour,
            "step": self.step,
            "minDateTime": self.min_date_time,
            "maxDateTime": self.max_date_time,
            "timezone": self.timezone,
            "withSeconds": self.with_seconds,
        }


class TimePicker(Field):
    kind: ClassVar[str] = "time-picker"
    vue_component: ClassVar[str] = "TimePicker"
    flutter_widget: ClassVar[str] = "LaraviltTimePicker"

    format_24_hour: bool = False
    step: int = 1  # minutes
    min_time: Optional[str] = None
    max_time: Optional[str] = None
    with_seconds: bool = False

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "format24Hour": self.format_24_hour,
            "step": self.step,
            "minTime": self.min_time,
            "maxTime": self.max_time,
            "withSeconds": self.with_seconds,
        }


class DateRangePicker(Field):
    """Start and end date, submitted as ``{"start": ..., "end": ...}`` or a pair."""

    kind: ClassVar[str] = "date-range-picker"
    vue_component: ClassVar[str] = "DateRangePicker"
    flutter_widget: ClassVar[str] = "LaraviltDateRangePicker"

    min_date: Optional[str] = None
    max_date: Optional[str] = None
    locale: str = "en"
    number_of_months: int = 2
    close_on_select: bool = False

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "minDate": self.min_date,
            "maxDate": self.max_date,
            "locale": self.locale,
            "numberOfMonths": self.number_of_months,
            "closeOnSelect": self.close_on_select,
        }


class ColorPicker(Field):
    kind: ClassVar[str] = "color-picker"
    vue_component: ClassVar[str] = "ColorPicker"
    flutter_widget: ClassVar[str] = "LaraviltColorPicker"

    alpha: bool = False
    format: Literal["hex", "rgb", "hsl"] = "hex"
    swatches: List[str] = PydanticField(default_factory=list)
    show_swatches: bool = False
    multiple: bool = False
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    popup_position: str = "bottom-start"

    def default_value(self) -> Any:
        if self.default is None and self.multiple:
            return []
        return copy.deepcopy(self.default)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "alpha": self.alpha,
            "format": self.format,
            "swatches": list(self.swatches),
            "showSwatches": self.show_swatches,
            "multiple": self.multiple,
            "minItems": self.min_items,
            "maxItems": self.max_items,
            "popupPosition": self.popup_position,
        }


class CodeEditor(Field):
    kind: ClassVar[str] = "code-editor"
    vue_component: ClassVar[str] = "CodeEditor"
    flutter_widget: ClassVar[str] = "LaraviltCodeEditor"

    language: str = "javascript"
    theme: str = "light"
    line_numbers: bool = True

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "language": self.language,
            "theme": self.theme,
            "lineNumbers": self.line_numbers,
            "readOnly": self.readonly,
        }


class IconPicker(Field):
    kind: ClassVar[str] = "icon-picker"
    vue_component: ClassVar[str] = "IconPicker"
    flutter_widget: ClassVar[str] = "LaraviltIconPicker"

    icons: List[str] = PydanticField(default_factory=lambda: list(DEFAULT_ICONS))
    searchable: bool = True
    grid_columns: int = 8
    show_icon_name: bool = True

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "icons": list(self.icons),
            "searchable": self.searchable,
            "placeholder": self.placeholder or "Select an icon...",
            "gridColumns": self.grid_columns,
            "showIconName": self.show_icon_name,
        }


class MarkdownEditor(Field):
    kind: ClassVar[str] = "markdown-editor"
    vue_component: ClassVar[str] = "MarkdownEditor"
    flutter_widget: ClassVar[str] = "LaraviltMarkdownEditor"

    preview: bool = True
    toolbar_buttons: List[List[str]] = PydanticField(
        default_factory=lambda: copy.deepcopy(MARKDOWN_TOOLBAR_BUTTONS)
    )
    show_character_count: bool = False
    show_word_count: bool = False
    max_length: Optional[int] = None
    file_attachments_enabled: bool = False
    file_attachments_disk: str = "public"
    file_attachments_directory: str = "attachments"
    file_attachments_accepted_file_types: List[str] = PydanticField(
        default_factory=lambda: list(ATTACHMENT_FILE_TYPES)
    )
    file_attachments_max_size: int = ATTACHMENT_MAX_SIZE

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "preview": self.preview,
            "toolbarButtons": copy.deepcopy(self.toolbar_buttons),
            "showCharacterCount": self.show_character_count,
            "showWordCount": self.show_word_count,
            "maxLength": self.max_length,
            "fileAttachmentsEnabled": self.file_attachments_enabled,
            "fileAttachmentsDisk": self.file_attachments_disk,
            "fileAttachmentsDirectory": self.file_attachments_directory,
            "fileAttachmentsAcceptedFileTypes": list(self.file_attachments_accepted_file_types),
            "fileAttachmentsMaxSize": self.file_attachments_max_size,
        }


class RichEditor(Field):
    """HTML editor; with ``json=True`` the state is the editor's document tree."""

    kind: ClassVar[str] = "rich-editor"
    vue_component: ClassVar[str] = "RichEditor"
    flutter_widget: ClassVar[str] = "LaraviltRichEditor"

    toolbar_buttons: List[Any] = PydanticField(default_factory=list)
    min_height: Optional[int] = None
    max_height: Optional[int] = None
    json_: bool = PydanticField(default=False, alias="json")
    floating_toolbars: Dict[str, List[str]] = PydanticField(default_factory=dict)
    text_colors: Dict[str, str] = PydanticField(default_factory=dict)
    custom_text_colors: Dict[str, str] = PydanticField(default_factory=dict)
    file_attachments_disk: Optional[str] = None
    file_attachments_directory: Optional[str] = None
    file_attachments_visibility: Optional[str] = None
    file_attachments_accepted_file_types: List[str] = PydanticField(default_factory=list)
    file_attachments_max_size: Optional[int] = None
    custom_blocks: List[str] = PydanticField(default_factory=list)
    merge_tags: List[str] = PydanticField(default_factory=list)
    active_panel: Optional[str] = None
    show_character_count: bool = False
    show_word_count: bool = False

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "toolbarButtons": copy.deepcopy(self.toolbar_buttons),
            "minHeight": self.min_height,
            "maxHeight": self.max_height,
            "json": self.json_,
            "floatingToolbars": copy.deepcopy(self.floating_toolbars),
            "textColors": dict(self.text_colors),
            "customTextColors": dict(self.custom_text_colors),
            "fileAttachmentsDisk": self.file_attachments_disk,
            "fileAttachmentsDirectory": self.file_attachments_directory,
            "fileAttachmentsVisibility": self.file_attachments_visibility,
            "fileAttachmentsAcceptedFileTypes": list(self.file_attachments_accepted_file_types),
            "fileAttachmentsMaxSize": self.file_attachments_max_size,
            "customBlocks": list(self.custom_blocks),
            "mergeTags": list(self.merge_tags),
            "activePanel": self.active_panel,
            "showCharacterCount": self.show_character_count,
            "showWordCount": self.show_word_count,
        }


class PinInput(Field):
    kind: ClassVar[str] = "pin-input"
    vue_component: ClassVar[str] = "PinInput"
    flutter_widget: ClassVar[str] = "LaraviltPinInput"

    length: int = PydanticField(default=4, ge=1)
    mask: bool = False
    otp: bool = False
    # ``type`` is taken by the field kind in the props
    pin_type: Literal["numeric", "alphanumeric"] = "numeric"
    align: str = "left"

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "length": self.length,
            "mask": self.mask,
            "otp": self.otp,
            "pinType": self.pin_type,
            "align": self.align,
        }


class RateInput(Field):
    kind: ClassVar[str] = "rate-input"
    vue_component: ClassVar[str] = "RateInput"
    flutter_widget: ClassVar[str] = "LaraviltRateInput"

    max_rating: int = PydanticField(default=5, ge=1)
    allow_half: bool = False
    icon: str = "star"
    color: Optional[str] = None
    show_value: bool = False

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "max": self.max_rating,
            "allowHalf": self.allow_half,
            "icon": self.icon,
            "color": self.color,
            "showValue": self.show_value,
        }


class Slider(Field):
    kind: ClassVar[str] = "slider"
    vue_component: ClassVar[str] = "Slider"
    flutter_widget: ClassVar[str] = "LaraviltSlider"

    min: float = 0
    max: float = 100
    step: float = PydanticField(default=1, gt=0)
    marks: Dict[str, str] = PydanticField(default_factory=dict)
    show_value: bool = True

    @field_validator("marks", mode="before")
    @classmethod
    def string_mark_keys(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {f"{k:g}" if isinstance(k, (int, float)) else str(k): v for k, v in value.items()}
        return value

    def default_value(self) -> Any:
        return self.min if self.default is None else copy.deepcopy(self.default)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "min": self.min,
            "max": self.max,
            "step": self.step,
            "marks": dict(self.marks),
            "showValue": self.show_value,
        }


class Hidden(Field):
    kind: ClassVar[str] = "hidden"
    vue_component: ClassVar[str] = "Hidden"
    flutter_widget: ClassVar[str] = "LaraviltHidden"


class FileUpload(Field):
    kind: ClassVar[str] = "file-upload"
    vue_component: ClassVar[str] = "FileUpload"
    flutter_widget: ClassVar[str] = "LaraviltFileUpload"

    disk: str = "public"
    directory: Optional[str] = None
    visibility: str = "public"
    accepted_file_types: List[str] = PydanticField(default_factory=list)
    max_size: Optional[int] = None  # KB
    min_size: Optional[int] = None  # KB
    multiple: bool = False
    max_files: Optional[int] = None
    image: bool = False
    reorderable: bool = False

    @model_validator(mode="after")
    def image_accepts_images(self) -> "FileUpload":
        if self.image and not self.accepted_file_types:
            self.accepted_file_types = ["image/*"]
        return self

    def default_value(self) -> Any:
        if self.default is None and self.multiple:
            return []
        return copy.deepcopy(self.default)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "disk": self.disk,
            "directory": self.directory,
            "visibility": self.visibility,
            "acceptedFileTypes": list(self.accepted_file_types),
            "maxSize": self.max_size,
            "minSize": self.min_size,
            "multiple": self.multiple,
            "maxFiles": self.max_files,
            "image": self.image,
            "reorderable": self.reorderable,
        }


class Repeater(Field):
    """A list of items sharing one item schema.

    Item fields are bound relative to each item, so their names only need to
    be unique within the item schema.
    """

    kind: ClassVar[str] = "repeater"
    vue_component: ClassVar[str] = "Repeater"
    flutter_widget: ClassVar[str] = "LaraviltRepeater"

    components: List[Component] = PydanticField(default_factory=list, alias="schema")
    add_button_label: str = "Add"
    delete_button_label: str = "Delete"
    reorderable: bool = False
    collapsible: bool = False
    cloneable: bool = False
    deletable: bool = True
    min_items: Optional[int] = None
    max_items: Optional[int] = None

    def child_nodes(self) -> List[Component]:
        return list(self.components)

    def default_value(self) -> Any:
        return [] if self.default is None else copy.deepcopy(self.default)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        template = ctx.as_template()
        return {
            "schema": [template.render(c) for c in self.components],
            "addButtonLabel": self.add_button_label,
            "deleteButtonLabel": self.delete_button_label,
            "reorderable": self.reorderable,
            "collapsible": self.collapsible,
            "cloneable": self.cloneable,
            "deletable": self.deletable,
            "minItems": self.min_items,
            "maxItems": self.max_items,
        }


class Block(Component):
    kind: ClassVar[str] = "block"
    vue_component: ClassVar[str] = "BuilderBlock"
    flutter_widget: ClassVar[str] = "LaraviltBuilderBlock"

    name: str
    label: Optional[str] = None
    icon: Optional[str] = None
    components: List[Component] = PydanticField(default_factory=list, alias="schema")
    max_items: Optional[int] = None

    def child_nodes(self) -> List[Component]:
        return list(self.components)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label if self.label is not None else label_from_name(self.name),
            "icon": self.icon,
            "maxItems": self.max_items,
            "schema": [ctx.render(c) for c in self.components],
        }


class Builder(Field):
    kind: ClassVar[str] = "builder"
    vue_component: ClassVar[str] = "Builder"
    flutter_widget: ClassVar[str] = "LaraviltBuilder"

    blocks: List[Block] = PydanticField(default_factory=list)
    add_action_label: str = "Add Block"
    add_action_alignment: str = "center"
    addable: bool = True
    deletable: bool = True
    reorderable: bool = True
    reorderable_with_buttons: bool = False
    reorderable_with_drag_and_drop: bool = True
    collapsible: bool = False
    collapsed: bool = False
    cloneable: bool = False
    block_numbers: bool = True
    block_icons: bool = False
    block_previews: bool = False
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    block_picker_columns: int = 1
    block_picker_width: Optional[str] = None

    def child_nodes(self) -> List[Component]:
        return list(self.blocks)

    def default_value(self) -> Any:
        return [] if self.default is None else copy.deepcopy(self.default)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        template = ctx.as_template()
        blocks = [template.render(block) for block in self.blocks]
        return {
            "blocks": blocks,
            # same list under ``schema``, like every other container
            "schema": blocks,
            "addActionLabel": self.add_action_label,
            "addActionAlignment": self.add_action_alignment,
            "addable": self.addable,
            "deletable": self.deletable,
            "reorderable": self.reorderable,
            "reorderableWithButtons": self.reorderable_with_buttons,
            "reorderableWithDragAndDrop": self.reorderable_with_drag_and_drop,
            "collapsible": self.collapsible,
            "collapsed": self.collapsed,
            "cloneable": self.cloneable,
            "blockNumbers": self.block_numbers,
            "blockIcons": self.block_icons,
            "blockPreviews": self.block_previews,
            "minItems": self.min_items,
            "maxItems": self.max_items,
            "blockPickerColumns": self.block_picker_columns,
            "blockPickerWidth": self.block_picker_width,
        }
