"""
POS modules -- feature packages built on pos_kernel.

Modules may import pos_kernel and pos_config; the kernel never imports
modules.
"""
