# File: options_flow.py
"""Options Flow for the Numu integration.

Changing the first day of the week reshapes every weekly bucket, so the
entry is reloaded by the update listener afterwards.
"""

from typing import Any, Optional

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.helpers import selector

from . import const


def week_start_schema(default: str = const.DEFAULT_WEEK_START) -> vol.Schema:
    """Schema with the first-day-of-week selector."""
    return vol.Schema(
        {
            vol.Required(const.CONF_WEEK_START, default=default): selector.SelectSelector(
                selector.SelectSelectorConfig(
                    options=list(const.WEEKDAY_OPTIONS),
                    mode=selector.SelectSelectorMode.DROPDOWN,
                    translation_key=const.CONF_WEEK_START,
                )
            ),
        }
    )


class NumuOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for general settings."""

    def __init__(self, _config_entry: config_entries.ConfigEntry):
        """Initialize the options flow."""
        self._entry_options: dict[str, Any] = {}

    async def async_step_init(self, user_input: Optional[dict[str, Any]] = None):
        """Show and save the general options."""
        self._entry_options = dict(self.config_entry.options)

        if user_input is not None:
            self._entry_options[const.CONF_WEEK_START] = user_input[
                const.CONF_WEEK_START
            ]
            const.LOGGER.debug(
                "DEBUG: Week start set to %s", self._entry_options[const.CONF_WEEK_START]
            )
            return self.async_create_entry(title="", data=self._entry_options)

        return self.async_show_form(
            step_id="init",
            data_schema=week_start_schema(
                self._entry_options.get(const.CONF_WEEK_START, const.DEFAULT_WEEK_START)
            ),
        )
