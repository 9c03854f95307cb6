class KvStatError(Exception):
    pass

class EmptyDataset(KvStatError):
    def __init__(self, db=0):
        KvStatError.__init__(self, f"Sorry but DB {db} is empty")
        self.db = db

class StoreError(KvStatError):
    pass

class SamplingExhausted(KvStatError):
    ''' Too many draws were discarded (zero or unknown length) before
        collecting the requested amount of samples.
    '''
    def __init__(self, collected, wanted, discarded):
        KvStatError.__init__(self,
                f"No valid samples found: got {collected} of {wanted} "
                f"after discarding {discarded} draws")
        self.collected = collected
        self.wanted = wanted
        self.discarded = discarded

class NothingToRender(KvStatError):
    def __init__(self):
        KvStatError.__init__(self, "No data to display.")
