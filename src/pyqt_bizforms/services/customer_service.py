"""Customers of the signed-in user."""

from typing import List

from pyqt_bizforms.forms.form_config_types import FormSelectOption

from .resource_service import TableResourceService


class CustomerService(TableResourceService):
    """Customers are scoped by user only, not by organization."""

    table_name = "customers"
    label = "Customer"
    plural = "customers"

    def as_options(self) -> List[FormSelectOption]:
        """Loaded customers as select options, labelled by name."""
        return [FormSelectOption(value=c["id"], label=c.get("name") or c["id"]) for c in self.items]
