"""Localized strings carried by a result.

The strings are already translated into the run's locale by the time they land
here; ``icu_message_paths`` keeps the message ids so a consumer can translate
the record again.
"""

from dataclasses import dataclass, field

from .fields import STRING, VALUE, JsonValue, list_of, map_of, message_of, wire


def _label(number: int, **kwargs):
    return field(default=None, metadata=wire(number, STRING, **kwargs))


@dataclass
class RendererFormattedStrings:
    """Formatted UI strings used by report renderers.

    Six rows are deprecated. Two of them have replacements and readers should
    go through ``compat.formatted_string``.
    """
    variance_disclaimer: str | None = _label(1)
    opportunity_resource_column_label: str | None = _label(2)
    opportunity_savings_column_label: str | None = _label(3)
    error_missing_audit_info: str | None = _label(4)
    error_label: str | None = _label(5)
    warning_header: str | None = _label(6)
    audit_group_expand_tooltip: str | None = _label(7)
    passed_audits_group_title: str | None = _label(8)
    not_applicable_audits_group_title: str | None = _label(9)
    manual_audits_group_title: str | None = _label(10)
    toplevel_warnings_message: str | None = _label(11)
    scorescale_label: str | None = _label(12)
    crc_longest_duration_label: str | None = _label(13)
    crc_initial_navigation: str | None = _label(14)
    ls_performance_category_description: str | None = _label(15)
    lab_data_title: str | None = _label(16)
    warning_audits_group_title: str | None = _label(17)
    snippet_expand_button_label: str | None = _label(18)
    snippet_collapse_button_label: str | None = _label(19)
    third_party_resources_label: str | None = _label(20)
    runtime_desktop_emulation: str | None = _label(21)
    runtime_mobile_emulation: str | None = _label(22)
    runtime_no_emulation: str | None = _label(23)
    runtime_settings_benchmark: str | None = _label(24)
    runtime_settings_cpu_throttling: str | None = _label(25, json="runtimeSettingsCPUThrottling")
    runtime_settings_device: str | None = _label(26)
    runtime_settings_fetch_time: str | None = _label(27, deprecated=True)
    runtime_settings_network_throttling: str | None = _label(28)
    runtime_settings_title: str | None = _label(29, deprecated=True)
    runtime_settings_ua: str | None = _label(
        30, json="runtimeSettingsUA", superseded_by="runtime_settings_ua_network")
    runtime_settings_ua_network: str | None = _label(31, json="runtimeSettingsUANetwork")
    runtime_settings_url: str | None = _label(32, deprecated=True)
    runtime_unknown: str | None = _label(33)
    dropdown_copy_json: str | None = _label(34, json="dropdownCopyJSON")
    dropdown_dark_theme: str | None = _label(35)
    dropdown_print_expanded: str | None = _label(36)
    dropdown_print_summary: str | None = _label(37)
    dropdown_save_gist: str | None = _label(38)
    dropdown_save_html: str | None = _label(39, json="dropdownSaveHTML")
    dropdown_save_json: str | None = _label(40, json="dropdownSaveJSON")
    dropdown_viewer: str | None = _label(41)
    footer_issue: str | None = _label(42)
    throttling_provided: str | None = _label(43)
    runtime_settings_channel: str | None = _label(44, deprecated=True)
    calculator_link: str | None = _label(45)
    runtime_settings_axe_version: str | None = _label(46)
    view_treemap_label: str | None = _label(47)
    show_relevant_audits: str | None = _label(48)
    runtime_single_load: str | None = _label(49)
    runtime_single_load_tooltip: str | None = _label(50)
    runtime_analysis_window: str | None = _label(51)
    show: str | None = _label(52)
    hide: str | None = _label(53)
    expand_view: str | None = _label(54)
    collapse_view: str | None = _label(55)
    runtime_slow_4g: str | None = _label(56)
    runtime_custom: str | None = _label(57)
    view_trace_label: str | None = _label(58)
    view_original_trace_label: str | None = _label(
        59, superseded_by="dropdown_view_unthrottled_trace")
    runtime_settings_screen_emulation: str | None = _label(60)
    first_party_chip_label: str | None = _label(61)
    open_in_a_new_tab_tooltip: str | None = _label(62)
    unattributable: str | None = _label(63)
    dropdown_view_unthrottled_trace: str | None = _label(64)
    runtime_analysis_window_timespan: str | None = _label(65)
    runtime_analysis_window_snapshot: str | None = _label(66)
    pwa_removal_message: str | None = _label(67)
    dropdown_insights_toggle: str | None = _label(68)
    insights_notice: str | None = _label(69)
    try_insights: str | None = _label(70)
    go_back_to_audits: str | None = _label(71)


@dataclass
class I18n:
    renderer_formatted_strings: RendererFormattedStrings | None = field(
        default=None, metadata=wire(1, message_of(RendererFormattedStrings)))
    # message id -> paths inside the record where that message was used
    icu_message_paths: dict[str, list[JsonValue]] | None = field(
        default=None, metadata=wire(2, map_of(list_of(VALUE))))
