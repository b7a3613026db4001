"""Built-in CLI sub-commands for specsync.

* :mod:`~specsync.commands.sync` -- import documents and write the collection
  JSON.
* :mod:`~specsync.commands.inspect` -- show the requests an import would
  produce as a table.

Both modules export a plain callback function registered directly on the
root app by :mod:`specsync.app`.
"""
