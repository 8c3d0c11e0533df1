# File: config_flow.py
"""Config flow for the Numu integration.

A single instance holds every system; the only setup choice is which
weekday starts a week. Systems, tasks and tests are managed through
services afterwards.
"""

from typing import Any, Optional

from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from .options_flow import NumuOptionsFlowHandler, week_start_schema


class NumuConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for Numu."""

    VERSION = 1

    async def async_step_user(self, user_input: Optional[dict[str, Any]] = None):
        """Create the single Numu entry."""
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        if user_input is not None:
            return self.async_create_entry(
                title=const.NUMU_TITLE,
                data={},
                options={
                    const.CONF_WEEK_START: user_input.get(
                        const.CONF_WEEK_START, const.DEFAULT_WEEK_START
                    )
                },
            )

        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER, data_schema=week_start_schema()
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return NumuOptionsFlowHandler(config_entry)
