"""
The `packaging` sub-package turns a resolved SRPM into binary RPMs and reads
back what was produced.

This includes:
- Invoking the containerized build through the container runtime CLI.
- Listing the RPM files the build image wrote into the output directory.
"""
