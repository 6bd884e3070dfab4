from typing import Mapping

# Field table type: field name -> groups the field belongs to
FieldGroups = Mapping[str, frozenset[str]]


def fields_in_group(field_groups: FieldGroups, group: str) -> list[str]:
    """Field names belonging to group, in table order."""
    return [name for name, groups in field_groups.items() if group in groups]
