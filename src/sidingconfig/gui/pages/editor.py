"""
Configuration editor page.

Tabs for material rates, height multipliers, general settings and the GitHub
target, with a Save action that publishes the configuration module.
"""

from __future__ import annotations

import logging

from nicegui import ui

from ...artifact import ArtifactFormatError
from ...github_client import GitHubApiError
from ...publisher import PublishState, PublishStatus
from ...target import RemoteTarget
from ..components import settings_card, value_input
from ..state import EditorState
from ..utils import confirm_dialog, safe_notify, safe_timer

LOGGER = logging.getLogger(__name__)

EDITOR_TABS = [
    ("materials", "Material Rates", "construction"),
    ("heights", "Height Multipliers", "height"),
    ("settings", "Settings", "tune"),
    ("github", "GitHub", "cloud_upload"),
]

SETTING_LABELS = {
    "baselineRevenue": "Baseline Revenue",
    "minBuildingsPerDay": "Min Buildings per Day",
    "roundingPrecision": "Rounding Precision",
    "scaleMultiplierPrecision": "Scale Multiplier Precision",
}

STATUS_CLASSES = {
    PublishState.LOADING: "text-blue-600",
    PublishState.SUCCESS: "text-green-600",
    PublishState.ERROR: "text-red-600",
}


def editor_page(state: EditorState) -> None:
    """Render the editor for one client's ``EditorState``."""
    client = ui.context.client

    with ui.column().classes("w-full max-w-5xl mx-auto p-4 gap-4"):
        with ui.row().classes("w-full items-center justify-between"):
            ui.label("Calculator Configuration").classes("text-3xl font-bold text-slate-800 dark:text-slate-100")
            with ui.row().classes("items-center gap-2"):
                modified_label = ui.label("").classes("text-sm text-amber-600")
                pull_button = ui.button("Load from GitHub", icon="cloud_download").props("outline")
                save_button = ui.button("Save to GitHub", icon="save").props("color=primary")
                cancel_button = ui.button("Cancel", icon="close").props("flat")
                cancel_button.set_visibility(False)

        status_label = ui.label("").classes("text-sm")

        def show_status(status: PublishStatus) -> None:
            status_label.text = status.message
            status_label.classes(replace=f"text-sm {STATUS_CLASSES.get(status.state, '')}")

        def update_modified(*_) -> None:
            modified_label.text = "Unsaved changes" if state.store.is_modified else ""

        state.store.register_callback(update_modified)
        client.on_disconnect(lambda: state.store.unregister_callback(update_modified))

        with ui.tabs().classes("w-full") as tabs:
            tab_elements = {tab_id: ui.tab(tab_id, label=label, icon=icon) for tab_id, label, icon in EDITOR_TABS}

        with ui.tab_panels(tabs, value=tab_elements["materials"]).classes("w-full"):
            with ui.tab_panel(tab_elements["materials"]):
                _materials_panel(state)
            with ui.tab_panel(tab_elements["heights"]):
                _heights_panel(state)
            with ui.tab_panel(tab_elements["settings"]):
                _settings_panel(state)
            with ui.tab_panel(tab_elements["github"]):
                _github_panel(state)

        async def save() -> None:
            save_button.disable()
            pull_button.disable()
            cancel_button.set_visibility(True)
            show_status(PublishStatus(PublishState.LOADING, "Saving to GitHub..."))
            try:
                status = await state.publish()
            except Exception as exc:  # noqa: BLE001
                LOGGER.exception("Publish failed: %s", exc)
                status = PublishStatus(PublishState.ERROR, f"Error saving to GitHub: {exc}")
            finally:
                save_button.enable()
                pull_button.enable()
                cancel_button.set_visibility(False)

            if getattr(client, "_deleted", False):
                return
            show_status(status)
            if status.state is PublishState.SUCCESS:
                safe_timer(state.publisher.status_clear_delay, lambda: _clear(state, show_status), once=True)
            else:
                safe_notify(client, status.message, type="negative")

        async def pull() -> None:
            if state.store.is_modified and not await confirm_dialog(
                "Discard unsaved changes and load the committed configuration?", confirm_label="Load"
            ):
                return
            try:
                found = await state.pull()
            except (GitHubApiError, ArtifactFormatError) as exc:
                safe_notify(client, f"Failed to load from GitHub: {exc}", type="negative")
                return
            if not found:
                safe_notify(client, "No configuration committed yet", type="warning")
                return
            safe_notify(client, "Loaded configuration from GitHub", type="positive")
            _materials_panel.refresh()
            _heights_panel.refresh()
            _settings_panel.refresh()

        def cancel() -> None:
            if state.cancel_publish():
                ui.notify("Cancelling publish...", type="info")

        save_button.on_click(save)
        pull_button.on_click(pull)
        cancel_button.on_click(cancel)


def _clear(state: EditorState, show_status) -> None:
    state.publisher.clear_status()
    show_status(state.publisher.status)


@ui.refreshable
def _materials_panel(state: EditorState) -> None:
    with settings_card("Material Rates", icon="construction", description="Production rate and price per building"):
        for name, rate in state.store.current.material_rates.items():
            with ui.row().classes("w-full items-end gap-3"):
                ui.label(name).classes("w-32 font-medium text-slate-700 dark:text-slate-200")
                value_input(
                    "Buildings per Day",
                    rate.buildings_per_day,
                    lambda raw, n=name: state.store.update_material_rate(n, "buildingsPerDay", raw),
                )
                value_input(
                    "Price per Building",
                    rate.price_per_building,
                    lambda raw, n=name: state.store.update_material_rate(n, "pricePerBuilding", raw),
                )
                value_input(
                    "Description",
                    rate.description,
                    lambda raw, n=name: state.store.update_material_rate(n, "description", raw),
                    numeric=False,
                    width="flex-1",
                )

                async def delete(n: str = name) -> None:
                    result = await state.store.delete_material(n, confirm_dialog)
                    if result.changed:
                        _materials_panel.refresh()

                ui.button(icon="delete", on_click=delete).props("flat dense color=negative")

        with ui.row().classes("items-end gap-2 mt-2"):
            new_name = ui.input(label="New material name").props("outlined dense")

            def add() -> None:
                result = state.store.add_material(new_name.value or "")
                if result.changed:
                    _materials_panel.refresh()
                elif (new_name.value or "").strip():
                    ui.notify(f"Material '{new_name.value}' already exists", type="warning")

            ui.button("Add Material", icon="add", on_click=add).props("outline")


@ui.refreshable
def _heights_panel(state: EditorState) -> None:
    with settings_card("Height Multipliers", icon="height", description="Adjustments by building story count"):
        for story, multiplier in state.store.current.height_multipliers.items():
            with ui.row().classes("w-full items-end gap-3"):
                ui.label(f"{story} stories").classes("w-32 font-medium text-slate-700 dark:text-slate-200")
                value_input(
                    "Time Multiplier",
                    multiplier.time_multiplier,
                    lambda raw, s=story: state.store.update_height_multiplier(s, "timeMultiplier", raw),
                )
                value_input(
                    "Price Multiplier",
                    multiplier.price_multiplier,
                    lambda raw, s=story: state.store.update_height_multiplier(s, "priceMultiplier", raw),
                )


@ui.refreshable
def _settings_panel(state: EditorState) -> None:
    values = state.store.current.settings.model_dump(by_alias=True)
    with settings_card("Settings", icon="tune", description="General pricing settings"):
        with ui.row().classes("w-full gap-4 flex-wrap"):
            for name, label in SETTING_LABELS.items():
                value_input(label, values[name], lambda raw, n=name: state.store.update_setting(n, raw), width="w-56")


def _github_panel(state: EditorState) -> None:
    target = state.target
    with settings_card("GitHub", icon="cloud_upload", description="Repository the configuration is committed to"):
        token = ui.input(label="Personal Access Token", value=target.token, password=True, password_toggle_button=True)
        token.classes("w-full").props("outlined dense")
        with ui.row().classes("w-full gap-4"):
            owner = ui.input(label="Owner", value=target.owner).classes("flex-1").props("outlined dense")
            repo = ui.input(label="Repository", value=target.repo).classes("flex-1").props("outlined dense")
            branch = ui.input(label="Branch", value=target.branch).classes("w-40").props("outlined dense")
        ui.label(f"File: {target.path}").classes("text-sm text-slate-500 dark:text-slate-400")

        def save_settings() -> None:
            updated = RemoteTarget(
                token=(token.value or "").strip(),
                owner=(owner.value or "").strip(),
                repo=(repo.value or "").strip(),
                branch=(branch.value or "").strip() or "main",
                path=state.target.path,
            )
            state.update_target(updated)
            ui.notify("GitHub settings saved", type="positive")

        ui.button("Save Settings", icon="save", on_click=save_settings).props("outline")
