#!/usr/bin/env python3
"""Example script to run the alert pipeline."""

from alert_pipeline.cli import main


if __name__ == '__main__':
    main()
