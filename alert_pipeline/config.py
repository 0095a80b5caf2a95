"""Configuration loading."""

import copy
from typing import Dict

import yaml


DEFAULT_CONFIG: Dict = {
    'target_language': 'en',
    'scoring_mode': 'enhanced',
    'duplicate_threshold': 0.7,
    'high_urgency_threshold': 4,
    'retention_days': 30,
    'database': {
        'path': ':memory:',
    },
    'notifications': {
        'recipients': [],
        'batch_size': 5,
        'drain_interval': 5.0,
        'send_delay': 1.0,
    },
    'scheduler': {
        'strict_schedules': False,
        'tasks': [
            {
                'id': 'data-collection',
                'name': 'Automated Data Collection',
                'schedule': '*/15 * * * *',
                'max_retries': 3,
            },
            {
                'id': 'cleanup',
                'name': 'Database Cleanup',
                'schedule': '0 2 * * *',
                'max_retries': 2,
            },
        ],
    },
    'sources': [
        {'id': 1, 'name': 'TechCrunch RSS', 'url': 'https://techcrunch.com/feed/', 'type': 'rss'},
        {'id': 2, 'name': 'Security Week RSS', 'url': 'https://www.securityweek.com/feed/', 'type': 'rss'},
    ],
    'output': {
        'log_level': 'INFO',
    },
}


def merge_config(base: Dict, override: Dict) -> Dict:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(config_path: str = None) -> Dict:
    """Load configuration from a YAML file over the defaults."""
    if not config_path:
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(config_path, 'r') as f:
        loaded = yaml.safe_load(f) or {}

    return merge_config(DEFAULT_CONFIG, loaded)
