"""Protocol layer: the wire side of the probe."""
