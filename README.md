# diphonebase

`diphonebase` reads diphone speech databases in the MBR binary format. It
parses the header, the diphone index, the packed pitch marks and the
information strings that follow the samples. It can fetch the raw samples of
any diphone. It can also rename or clone phonemes while a database loads. A
loaded database can be written out as a flat ROM image, and such an image can
be loaded back.

The package has no dependencies beyond the standard library.

## Installing

```
pip install .
```

To run the tests, install the `test` extra and run `pytest`.

## Opening a database

```python
from diphonebase.loader import open_database

with open_database("fr1") as db:
    print(db.version, db.freq, db.mbr_period)
    print(db.get_info(0))                     # first information string
    slot = db.diphone_table.search("a", "b")  # None if the diphone is absent
```

`open_database` reads the header and then picks a reader from the coding tag:

- **Layouts older than version 2.05.** The header marks these as coding 0. They
  go through `diphonebase.legacy.init_old`, which emits a `UserWarning`
  suggesting an upgrade.
- **Raw-waveform databases.** These are coding 1 and go through
  `diphonebase.loader.init_basic`.

Any other coding raises an error, as does a missing, empty, truncated or
malformed file, or a version newer than the one supported. The error is
`diphonebase.database.DatabaseError`. A pitch period longer than 400 samples
gives a `RuntimeWarning`.

`Database` works as a context manager, and `close()` closes its file.
`copy()` gives you a second `Database` that shares every table but opens its
own file handle.

### Information strings

- `db.get_info(index)` returns message `index`. It returns an empty string
  when the entry starts with the escape byte `0xFF`.
- `db.info_size(index)` returns the stored size of the message, counting the
  terminating zero.
- Both raise `IndexError` for an index that is out of range.

## Renaming and cloning phonemes

Pairs are given as text separated by spaces or newlines, `old new old new ...`:

```python
from diphonebase.loader import open_database_with_strings

db = open_database_with_strings("fr1", "_ #", "t t_h")
```

### Renaming

Renaming rebuilds the diphone table once, at load time, and also applies to
the silence phoneme.

A renaming key may appear only once. A repeated key, or a name left without a
partner, raises `diphonebase.zstring_list.RenamingError`.

### Cloning

Cloning keys may repeat. Every diphone that holds the source phoneme is copied
under the target name:

- on the left side,
- on the right side,
- or both. When both sides match, three new entries are added.

### Working with pairs directly

`open_renamed_database(path, rename, clone)` takes prepared `ZStringList`
objects instead of text. The `ZStringList` in `diphonebase.zstring_list`
provides:

- `parse`, `append_rename`, `find_rename` and `pairs` for renaming pairs;
- `encode` and `decode` for its use as a phoneme code table.

`HashTable` in `diphonebase.hash_tab` provides:

- `renamed`, `cloned` and `clone_one`, which return new tables;
- `add`, `search`, `get` and `names`.

## Reading diphone samples

```python
from diphonebase.database import DiphoneSynthesis

synth = DiphoneSynthesis("a", "b")
samples = db.load_diphone(synth)   # list of signed 16-bit samples
```

- `db.attach(synth)` finds the diphone and links its pitch marks without
  reading any samples. It raises `KeyError` if the diphone is unknown.
- `attach` also works out how logical frames map to physical ones. The result
  is `synth.real_frame` and `synth.tot_frame`.
- `synth.pitch_mark(index)` returns the `FrameType` of a frame, with indices
  starting at 1. A `FrameType` has the properties `voiced` and `transitory`.

## ROM images

```python
from diphonebase.rom import load_rom_image, write_rom_image

write_rom_image(db, "fr1.rom")
with open("fr1.rom", "rb") as fh:
    rom_db = load_rom_image(fh.read())
```

An image holds, in order:

1. the database name, magic and version;
2. the header;
3. the diphone table and its phoneme list;
4. the information strings;
5. the pitch marks;
6. the silence phoneme;
7. the samples.

Values are little endian and aligned on 2 or 4 bytes. A database loaded from
an image serves samples from memory and opens no file.

Only raw-waveform images can be loaded back. An image written from a
pre-2.05 database is rejected.

`RomReader` and `RomWriter` give direct access to the field encoding.

## What this package does not do

This package manages databases only. It does not:

- synthesize speech;
- read phoneme or prosody input;
- write audio files.

There is no command-line program.

Databases whose samples are compressed with a coder, rather than stored as raw
waveforms, cannot be decoded.