"""Run a Terraform or OpenTofu plan and write its output as collapsible Markdown."""

__version__ = "0.1.0"