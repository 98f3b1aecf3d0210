# -*- coding: utf-8 -*-
"""
Scripts package — CLI entry points for the community journal workflows.
Each script can be run by hand or from a scheduler's "Execute Command" step.
All scripts print clean JSON to stdout and use stderr/logging for debug.
"""
