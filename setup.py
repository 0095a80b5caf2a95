#!/usr/bin/env python3
"""Setup script for Alert Analysis Pipeline.

Installs all required dependencies and sets up the package.
"""

from setuptools import setup, find_packages

# Read README
with open('README.md', 'r', encoding='utf-8') as f:
    long_description = f.read()

# Read requirements
requirements = [
    'numpy>=1.21.0',
    'pandas>=1.3.0',
    'PyYAML>=5.4.0',
]

setup(
    name='alert-pipeline',
    version='1.0.0',
    description='Content analysis, scheduling and notification pipeline for collected alerts',
    long_description=long_description,
    long_description_content_type='text/markdown',
    author='',
    author_email='',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=requirements,
    extras_require={
        'test': [
            'pytest>=7.0.0',
            'pytest-cov>=3.0.0',
        ],
        'dev': [
            'pytest>=7.0.0',
            'pytest-cov>=3.0.0',
            'flake8>=4.0.0',
            'black>=22.0.0',
        ],
    },
    python_requires='>=3.9',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Topic :: Text Processing :: Linguistic',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ],
    entry_points={
        'console_scripts': [
            'alert-pipeline=alert_pipeline.cli:main',
        ],
    },
)
