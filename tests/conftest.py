"""Pytest configuration: project root on sys.path, headless matplotlib."""

import os
import sys

import matplotlib

matplotlib.use("Agg")

root = os.path.dirname(os.path.abspath(__file__))
proj = os.path.abspath(os.path.join(root, ".."))
if proj not in sys.path:
    sys.path.insert(0, proj)
