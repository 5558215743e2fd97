"""Export the environment variables understood by the settings classes.

Produces a JSON document describing every ``LEDGER_*`` variable (type,
default, whether it is required, description) for deployment docs.
"""

import json
from pathlib import Path
from typing import Any, Type

from pydantic import SecretStr
from pydantic_core import PydanticUndefined
from pydantic_settings import BaseSettings

from infrastructure.settings import (
    CacheSettings,
    IdentitySettings,
    RemoteSettings,
    StoreSettings,
)

SETTINGS_CLASSES: tuple[Type[BaseSettings], ...] = (
    RemoteSettings,
    StoreSettings,
    CacheSettings,
    IdentitySettings,
)


def get_model_metadata(settings_class: Type[BaseSettings]) -> dict[str, Any]:
    prefix = settings_class.model_config.get("env_prefix", "")
    properties = []

    for name, field in settings_class.model_fields.items():
        type_name = getattr(field.annotation, "__name__", str(field.annotation))
        default = field.get_default(call_default_factory=True)

        # Secrets defaulting to an empty string must be provided in production
        is_required = default is PydanticUndefined or (
            isinstance(default, SecretStr) and default.get_secret_value() == ""
        )

        if isinstance(default, SecretStr):
            display_default = "********" if not is_required else None
        elif is_required or default is None:
            display_default = None
        elif isinstance(default, (list, dict, bool)):
            display_default = default
        else:
            display_default = str(default)

        properties.append(
            {
                "env_var": f"{prefix}{name.upper()}",
                "type": "Secret" if "Secret" in type_name else type_name,
                "default": display_default,
                "required": is_required,
                "description": field.description or "",
            }
        )

    return {
        "class_name": settings_class.__name__,
        "prefix": prefix,
        "doc": settings_class.__doc__ or "",
        "properties": properties,
    }


def export_settings(output_path: Path) -> dict[str, Any]:
    """Write the settings metadata as JSON and return it."""
    data = {cls.__name__: get_model_metadata(cls) for cls in SETTINGS_CLASSES}

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)

    return data
