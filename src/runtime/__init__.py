"""Installed runtime management.

- home.py: nvs home layout and ``nvs init``
- installer.py: archive extraction and install replacement
- local.py: lookup of installed versions
- project.py: project/global version file discovery
- dispatch.py: running node/npm/npx/corepack from a version
- service.py: VersionManager tying lookup, download and install together
"""
