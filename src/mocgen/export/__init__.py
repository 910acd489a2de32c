"""Writers for rendered MOC documents."""
