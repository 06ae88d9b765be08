"""Namespace administration portal: drift reconciliation and configuration export."""
