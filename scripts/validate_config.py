#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List, Optional

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from leagues_app.config.loader import ConfigLoader
from leagues_app.config.validation import ConfigValidator, ValidationError
from leagues_app.errors import ConfigurationError


def validate_config_dir(config_dir: Optional[Path] = None) -> List[ValidationError]:
    """Validate the merged configuration for a config directory."""
    loader = ConfigLoader.create(config_dir)
    config = loader.merge_config()
    return ConfigValidator.validate_config(config)


def main():
    """Main validation function."""
    config_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    loader = ConfigLoader.create(config_dir)

    print(f"🔍 Validating leagues configuration in {loader.config_dir}...")

    all_valid = True

    try:
        errors = validate_config_dir(config_dir)
    except ConfigurationError as e:
        print(f"❌ Could not load configuration: {e}")
        sys.exit(1)

    if errors:
        print(f"❌ Found {len(errors)} validation errors:")
        for error in errors:
            print(f"  • {error.field}: {error.message} (value: {error.value})")
        all_valid = False
    else:
        print("✅ leagues.yaml merged with defaults is valid")

    print("\n📋 Building typed configuration...")
    try:
        config = loader.build_config()
        print(f"✅ Roster size {config.roster.max_size}, "
              f"backend {config.persistence.backend}, "
              f"full roster required: {config.submission.require_full_roster}")
    except ConfigurationError as e:
        print(f"❌ {e}")
        all_valid = False

    if all_valid:
        print("\n🎉 All configuration validation passed!")
        sys.exit(0)
    else:
        print("\n❌ Configuration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
