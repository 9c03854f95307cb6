import random

import pandas as pd
import valkey
from valkey.exceptions import AuthenticationError, ResponseError, ValkeyError

from .errors import StoreError

class Store:
    ''' The key-value store as seen by the reports.

        random_key() returns a key or None if the database is empty.
        serialized_length(key) returns the length in bytes of the value
        once serialized, or None if it could not be obtained.

        Both raise StoreError on protocol / connection errors.
    '''
    def random_key(self):
        raise NotImplementedError()

    def serialized_length(self, key):
        raise NotImplementedError()

    def info(self):
        # shall return a dict of INFO fields
        raise NotImplementedError()

    def ping(self):
        raise NotImplementedError()


class ValkeyStore(Store):
    def __init__(self, client):
        Store.__init__(self)
        self.client = client

    @classmethod
    def connect(cls, host, port, auth=None, db=0):
        client = valkey.Valkey(host=host, port=port, db=db, password=auth)
        store = cls(client)

        # Force the connection (and the AUTH) now so the errors are
        # reported before any report starts
        try:
            client.ping()
        except AuthenticationError as err:
            raise StoreError(f"AUTH failed: {err}") from err
        except ValkeyError as err:
            raise StoreError(f"Error connecting to server {host}:{port}: {err}") from err

        return store

    def random_key(self):
        try:
            return self.client.randomkey()
        except ValkeyError as err:
            raise StoreError(str(err)) from err

    def serialized_length(self, key):
        try:
            obj = self.client.debug_object(key)
        except ResponseError:
            # The key expired between RANDOMKEY and DEBUG OBJECT or DEBUG
            # is disabled on the server: the length is unknown for this key
            return None
        except ValkeyError as err:
            raise StoreError(str(err)) from err

        return obj.get('serializedlength')

    def info(self):
        try:
            return self.client.info()
        except ValkeyError as err:
            raise StoreError(str(err)) from err

    def ping(self):
        try:
            return self.client.ping()
        except ValkeyError as err:
            raise StoreError(str(err)) from err


class CsvStore(Store):
    ''' Offline store: the object sizes come from a CSV file with a 'size'
        column (and optionally a 'key' column) instead of a live server.

        Keys are drawn uniformly with replacement using the given
        random source.
    '''
    def __init__(self, keys, sizes, rnd=None):
        Store.__init__(self)
        assert len(keys) == len(sizes)

        self.keys = list(keys)
        self.sizes = [int(sz) for sz in sizes]
        self.rnd = rnd if rnd is not None else random.Random()

    @classmethod
    def from_csv(cls, fname, rnd=None):
        df = pd.read_csv(fname)
        if 'size' not in df.columns:
            raise StoreError(f"Missing 'size' column in {fname}")

        try:
            sizes = pd.to_numeric(df['size'], errors='raise')
        except (ValueError, TypeError) as err:
            raise StoreError(f"Invalid 'size' column in {fname}: {err}") from err

        # Unknown sizes are loaded as 0 so they are discarded by the sampler
        sizes = sizes.fillna(0)
        if (sizes != sizes.round()).any():
            raise StoreError(f"Invalid 'size' column in {fname}: sizes must be whole bytes")
        sizes = sizes.astype(int)
        if 'key' in df.columns:
            keys = df['key'].astype(str)
        else:
            keys = [f"key:{ix}" for ix in range(len(df))]

        return cls(keys, sizes, rnd)

    def random_key(self):
        if not self.keys:
            return None
        # the key is its position: duplicated key names are allowed
        return self.rnd.randrange(len(self.keys))

    def serialized_length(self, key):
        return self.sizes[key]

    def info(self):
        return {
                'db0': {'keys': len(self.keys), 'expires': 0},
                'used_memory': sum(self.sizes),
                'connected_clients': 1,
                'blocked_clients': 0,
                'total_commands_processed': 0,
                'total_connections_received': 1,
                }

    def ping(self):
        return True
