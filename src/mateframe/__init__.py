"""mateframe: an embeddable interactive chess-puzzle widget."""

__version__ = "0.1.0"
