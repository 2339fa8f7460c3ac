"""Test package for the pour-over trainer.

Core tests drive the kettle, cup bed, evaluator and session headlessly with a
fake clock; the UI smoke tests run pygame with the dummy video driver so no
real window opens. Run ``pytest`` from the project root.
"""
