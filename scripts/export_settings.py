import sys
from pathlib import Path

root_path = Path(__file__).parent.parent
sys.path.insert(0, str(root_path / "src" / "ledger"))

from infrastructure.settings_export import export_settings  # noqa: E402


if __name__ == "__main__":
    output_path = Path(sys.argv[1]) if len(sys.argv) > 1 else root_path / "docs" / "env-vars.json"
    export_settings(output_path)
    print(f"Exported settings to {output_path}")
