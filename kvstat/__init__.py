'''
kvstat: statistics about a Redis/Valkey instance.

Besides the usual polling reports (overview, vmstat, latency) it samples
the on-disk size of random keys and uses those samples to:

 - simulate the fragmentation of a swap file for several page sizes
   and suggest the best one (vmpage)
 - draw a histogram of the sizes (ondisk-size)
'''

__version__ = "0.1.0"
