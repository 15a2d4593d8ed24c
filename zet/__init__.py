"""zet - hierarchical zettelkasten identifiers, navigation and renaming."""

__version__ = "0.4.0"
