"""
Utility modules for the back office
"""
from .config_loader import AppConfig, NavConfig, NavSettings, load_app_config
from .translator import TemplateTranslator, Translator

__all__ = [
    'AppConfig',
    'NavConfig',
    'NavSettings',
    'load_app_config',
    'TemplateTranslator',
    'Translator',
]
