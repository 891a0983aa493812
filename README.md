# apkdecompiler

A pure-Python library for reading Android application packages. It opens an
APK, or an XAPK bundle that holds one, parses every DEX file inside it and
reads the compiled resource table. What you get:

- the classes of each DEX file, with their static and instance fields,
  direct and virtual methods and superclass;
- method bodies decoded into Dalvik instructions, each with its opcode,
  instruction category and operands;
- the string resources of `.arsc` resource tables, by name and by resource id;
- the `AndroidManifest.xml` bytes exactly as stored in the archive.

On top of that, `apkdecompiler.protogen` recovers protobuf message
definitions from classes generated by the protobuf Java lite runtime.

The package needs nothing beyond the standard library.

## Opening an APK

```python
from apkdecompiler.apk import Apk, ParseConfig

apk = Apk.open("app.apk", ParseConfig(sanitize_annotations=True))

for dex in apk.dexes:
    print(dex.filename, len(dex.classes))

print(apk.resources.strings_by_name.get("app_name"))
```

`Apk.open` accepts a path, a binary file object or the archive's bytes.
An archive that is already open as a `zipfile.ZipFile` can be passed to
`Apk.from_zip`.

`ParseConfig` has three options, all off by default:

- `sanitize_annotations` walks the annotations and source file names of
  every DEX file and adds the strings they use to
  `dex.raw.auxiliary_strings`, alongside the type, member and shorty names
  already recorded there;
- `fail_on_invalid_dex` raises on a DEX file that cannot be decoded (often an
  encrypted one) instead of skipping it;
- `fail_on_invalid_resource` does the same for `.arsc` files.

If the archive holds no DEX file and manifest of its own, it is treated as an
XAPK: the first `.apk` member that is not a `config.*` split and whose file
name has more than one dot is opened instead. `ApkNotFoundInXapkError` is
raised when there is none.

## Classes, methods and fields

Each `apkdecompiler.dex.Dex` holds:

- `classes`: `SmaliClass` objects keyed by type descriptor, such as
  `Lcom/example/Foo;`;
- `methods`: `Method` objects keyed by signature,
  `Lcom/example/Foo;->bar(I)V`, including methods that are only referenced;
- `fields`: `Field` objects keyed by descriptor,
  `Lcom/example/Foo;->baz:I`;
- `methods_by_index` and `fields_by_index`, mapping table indices to those
  keys.

Method bodies are not decoded up front. Call `Method.parse_code()` to fill
`method.body` with `apkdecompiler.instructions.Instruction` objects. Data
payloads of array fills and switches are skipped.

```python
from apkdecompiler.opcodes import InstructionType

method = dex.methods["Lcom/example/Foo;->bar(I)V"]
method.parse_code()
calls = [i for i in method.body if i.type == InstructionType.INVOCATION]
```

## Lower-level pieces

- `apkdecompiler.dex.Dex.parse(data, config)` decodes a single DEX file from
  its bytes; `config` is an `apkdecompiler.model.Config`.
- `apkdecompiler.instructions.parse_instruction` decodes one instruction from
  a reader.
- `apkdecompiler.opcodes` holds the `Opcode`, `InstructionType` and
  `OperandType` enumerations, with `operand_type_of` and
  `instruction_type_of`.
- `apkdecompiler.rawdex.RawDex`, `apkdecompiler.rawclass` and
  `apkdecompiler.dexdefs` expose the DEX id tables, class data and
  fixed-layout records. `apkdecompiler.rawvalue` exposes encoded values,
  arrays and annotations.
- `apkdecompiler.resource_table.ResourceTable.parse(reader)` reads a compiled
  resource table. `apkdecompiler.resource_pool` holds its chunk headers and
  string pools.
- `apkdecompiler.reader.ByteReader` is the little-endian cursor that all
  parsers share, including ULEB128 and SLEB128 decoding.

Malformed input raises `apkdecompiler.reader.ParseError` or one of its
subclasses, such as `InvalidHeaderSizeError`, `ResourceFormatError` or
`ULEB128OverflowError`.

## Recovering protobuf definitions

`ProtoParser` finds message classes, works out their fields, oneofs and
nesting, and groups them into `apkdecompiler.protodefs.ProtoPackage` objects.
It hands each package to a `PackageWriter`: any object with a
`write_package(package)` method.

```python
from apkdecompiler.protogen import ProtoParser


class Collect:
    def __init__(self):
        self.packages = []

    def write_package(self, package):
        self.packages.append(package)


writer = Collect()
parser = ProtoParser.from_file("app.apk", writer)
parser.parse()
parser.generate_proto_defs()
```

A package holds `ProtoMessage`, `ProtoField` and `ProtoOneof` values. Fields
whose type cannot be worked out are reported through the `logging` module.

## What it does not do

- There is no command-line tool. The package is a library only.
- Nothing renders `.proto` files. Turning a `ProtoPackage` into text and
  writing it to disk is left to your `PackageWriter`.
- The manifest is not decoded. `Apk.manifest_xml` holds the binary XML as
  raw bytes.
- Only string resources are read from resource tables. Strings whose length
  needs more than one length field come back empty.
- Instructions are decoded, but not turned back into smali or Java source.