"""DitLoop - terminal session and layout orchestration"""

__version__ = "0.1.0"
