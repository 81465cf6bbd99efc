"""Command-line front end for the spsbench harness."""
