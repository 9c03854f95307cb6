import contextlib

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

PLOT_RC = {
          'axes.labelsize':  8,
          'axes.titlesize':  8,
          'legend.fontsize': 8,
          'xtick.labelsize': 8,
          'ytick.labelsize': 8,
          'font.family': 'serif',
          'font.size':       8,
}

# From matplotlib documentation
SAVEFIG_KARGS = {
        'dpi',
        'facecolor',
        'edgecolor',
        'orientation',
        'format',
        'bbox_inches',
        'pad_inches',
        'metadata',
        }

@contextlib.contextmanager
def show(save=None, *, context='paper', style='darkgrid', transparent=True, **kargs):
    ''' Set up seaborn for the plots made inside the context and, on
        exit, save the figure into <save> or show it if no file was given.
    '''
    unused_kargs = set(kargs.keys()) - SAVEFIG_KARGS
    if unused_kargs:
        raise TypeError(f"Unexpected keyword arguments: {unused_kargs}")

    is_svg = save is not None and save.endswith('.svg')

    savefig_kargs = dict(bbox_inches='tight', dpi=300)
    savefig_kargs.update(kargs)

    if transparent and is_svg:
        if 'facecolor' in kargs:
            raise ValueError("You cannot mix 'transparent' with 'facecolor' in a SVG. Sorry.")
        savefig_kargs['facecolor'] = (0,0,0,0)

    plt.close()
    sns.set_theme(context=context, style=style, rc=PLOT_RC)
    try:
        yield
        plt.tight_layout()
        if save:
            plt.savefig(save, **savefig_kargs)
        else:
            plt.show()
    finally:
        if save:
            plt.close()
        sns.set_theme() # reset to seaborn's default

def histogram_frame(histogram):
    rows = histogram.rows()
    return pd.DataFrame({
        'bucket': [row.label for row in rows],
        'frequency': [row.frequency for row in rows],
        'percentage': [row.percentage for row in rows],
        })

def plot_histogram(histogram, save=None):
    df = histogram_frame(histogram)
    with show(save):
        ax = sns.barplot(data=df, x='bucket', y='percentage', color=sns.color_palette('deep')[0])
        ax.set_xlabel('serialized length (bytes)')
        ax.set_ylabel('keys (%)')
        plt.xticks(rotation=45)

    return df
