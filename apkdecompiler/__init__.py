"""Read APK and XAPK archives: DEX classes, Dalvik bytecode, resource strings and protobuf messages."""

__version__ = "0.1.0"