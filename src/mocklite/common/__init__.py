from mocklite.common.canonical_json import ARG_SEPARATOR, canonical_dumps_str, canonicalize, render_arguments
