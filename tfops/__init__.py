"""terraform-ops: dependency graphs and summaries for Terraform plans."""

__version__ = "0.1.0"
