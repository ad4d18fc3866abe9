import os
import configparser
from pathlib import Path

CONFIG_DIR_ENV = 'PURCHASE_PLANNING_CONFIG_DIR'

# Written to settings.ini on first run; also the fallback for missing options
DEFAULT_SETTINGS = {
    'DATABASE': {
        'type': 'supabase',
        'engine': 'postgresql',
        'host': 'localhost',
        'port': '5432',
        'database': 'purchase_planning',
        'username': 'postgres',
        'password': 'postgres',
        'pool_size': '10',
        'max_overflow': '20',
        'pool_timeout': '30',
        'pool_recycle': '1800',
        'echo': 'False',
    },
    'SUPABASE': {
        'url': '',
        'key': '',
    },
    'LOGGING': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        'directory': 'logs',
        'max_size_mb': '10',
        'backup_count': '5',
        'console_output': 'True',
    },
    'PLANNING': {
        'default_factor': '1.70',
        'history_months': '6',
        'weight_avg': '0.2',
        'weight_trend': '0.3',
        'weight_exp': '0.5',
        'default_method': 'weighted',
        'projection_horizon': '3',
    },
    'FAMILY_FACTORS': {
        'cartuchos': '1.70',
        'comerciales': '1.82',
        'importados': '1.53',
    },
}

class Config:
    """Configuration manager for the Purchase Planning System.

    Settings live in ``settings.ini`` under the directory named by the
    ``PURCHASE_PLANNING_CONFIG_DIR`` environment variable (``config`` by
    default). A missing file is created from ``DEFAULT_SETTINGS``.
    """

    _instance = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._config_dir = Path(os.getenv(CONFIG_DIR_ENV, 'config'))
        self._config_path = self._config_dir / 'settings.ini'
        self._config = configparser.ConfigParser(interpolation=None)

        self._config_dir.mkdir(parents=True, exist_ok=True)

        if self._config_path.exists():
            self._config.read(self._config_path)
        else:
            self._config.read_dict(DEFAULT_SETTINGS)
            with open(self._config_path, 'w') as configfile:
                self._config.write(configfile)

        self._initialized = True

    @property
    def path(self) -> Path:
        return self._config_path

    def _lookup(self, read, section, key, default):
        try:
            return read(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default

    def get(self, section, key, default=None):
        """Get configuration value as string."""
        return self._lookup(self._config.get, section, key, default)

    def get_int(self, section, key, default=None):
        return self._lookup(self._config.getint, section, key, default)

    def get_float(self, section, key, default=None):
        return self._lookup(self._config.getfloat, section, key, default)

    def get_boolean(self, section, key, default=None):
        return self._lookup(self._config.getboolean, section, key, default)

    def _section_floats(self, section):
        return {
            key: self.get_float(section, key, float(value))
            for key, value in DEFAULT_SETTINGS[section].items()
        }

    @property
    def database_config(self):
        """Get SQL database settings."""
        defaults = DEFAULT_SETTINGS['DATABASE']
        return {
            'type': self.get('DATABASE', 'type', defaults['type']).split('#')[0].strip().lower(),
            'engine': self.get('DATABASE', 'engine', defaults['engine']),
            'host': self.get('DATABASE', 'host', defaults['host']),
            'port': self.get_int('DATABASE', 'port', 5432),
            'database': self.get('DATABASE', 'database', defaults['database']),
            'username': self.get('DATABASE', 'username', defaults['username']),
            'password': self.get('DATABASE', 'password', defaults['password']),
            'pool_size': self.get_int('DATABASE', 'pool_size', 10),
            'max_overflow': self.get_int('DATABASE', 'max_overflow', 20),
            'pool_timeout': self.get_int('DATABASE', 'pool_timeout', 30),
            'pool_recycle': self.get_int('DATABASE', 'pool_recycle', 1800),
            'echo': self.get_boolean('DATABASE', 'echo', False)
        }

    @property
    def supabase_config(self):
        """Get Supabase credentials; SUPABASE_URL/SUPABASE_KEY win over the file."""
        return {
            'url': os.getenv('SUPABASE_URL') or self.get('SUPABASE', 'url', ''),
            'key': os.getenv('SUPABASE_KEY') or self.get('SUPABASE', 'key', '')
        }

    @property
    def log_config(self):
        """Get logging configuration."""
        defaults = DEFAULT_SETTINGS['LOGGING']
        return {
            'level': self.get('LOGGING', 'level', defaults['level']),
            'format': self.get('LOGGING', 'format', defaults['format']),
            'directory': self.get('LOGGING', 'directory', defaults['directory']),
            'max_size_mb': self.get_int('LOGGING', 'max_size_mb', 10),
            'backup_count': self.get_int('LOGGING', 'backup_count', 5),
            'console_output': self.get_boolean('LOGGING', 'console_output', True)
        }

    @property
    def planning_config(self):
        """Get forecasting and purchase planning defaults."""
        return {
            'default_factor': self.get_float('PLANNING', 'default_factor', 1.70),
            'history_months': self.get_int('PLANNING', 'history_months', 6),
            'weight_avg': self.get_float('PLANNING', 'weight_avg', 0.2),
            'weight_trend': self.get_float('PLANNING', 'weight_trend', 0.3),
            'weight_exp': self.get_float('PLANNING', 'weight_exp', 0.5),
            'default_method': self.get('PLANNING', 'default_method', 'weighted'),
            'projection_horizon': self.get_int('PLANNING', 'projection_horizon', 3)
        }

    @property
    def family_factors(self):
        """Get the markup factor of each product family."""
        return self._section_floats('FAMILY_FACTORS')

# Global config instance
config = Config()
