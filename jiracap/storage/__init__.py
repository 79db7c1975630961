"""Working set storage: merging, the snapshot store and local persistence."""
