"""Allow running dbus-explorer as ``python -m dbus_explorer``."""

from dbus_explorer.cli import main

if __name__ == "__main__":
    main()
