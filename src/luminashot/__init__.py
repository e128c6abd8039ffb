"""LuminaShot: a reactive screenshot tool for Hyprland.

A screenshot utility with:
- Region selection
- Window selection that follows workspace switches
- Capture of the monitor under the cursor
- Clipboard, notification and hook delivery
"""

__version__ = "0.1.0"
