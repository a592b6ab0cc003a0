"""Host tool adapters.

Wrappers around LVM, ndctl/daxctl, mount/mkfs and kubectl. Every command
goes through noderesource.utils.shell.
"""
