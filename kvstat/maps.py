'''
Fragmentation maps: draw a page bitmap as runs of free / used pages,
left to right and top to bottom. Runs of the same kind alternate
between two shades.
'''
import itertools

from PIL import Image, ImageDraw
import seaborn as sns

# pixels per page, pixels per line and pixels between lines
PAGE_W = 1
LINE_H = 4
LINE_GAP = 1

def page_runs(bitmap):
    ''' Yield (is_free, page_count) for each run of equal pages. '''
    for cell, run in itertools.groupby(bitmap):
        yield cell == 0, sum(1 for _ in run)

def map_geometry(total_pages):
    # roughly 1.61 times wider than tall
    pages_per_line = max(1, round(((total_pages / 1.61)**0.5) * LINE_H/PAGE_W))
    lines = -(-total_pages // pages_per_line)

    width = pages_per_line * PAGE_W
    height = lines * LINE_H + (lines - 1) * LINE_GAP
    return pages_per_line, width, height

def bitmap_image(bitmap):
    assert len(bitmap) > 0
    palette = [tuple(round(c * 255) for c in rgb) for rgb in sns.color_palette("flare_r")]
    shades = {
            True:  (palette[0], palette[1]),    # free pages
            False: (palette[-3], palette[-2]),  # used pages
            }

    pages_per_line, width, height = map_geometry(len(bitmap))
    img = Image.new(size=(width, height), mode="RGB")
    draw = ImageDraw.Draw(img)

    col = y = 0
    seen = {True: 0, False: 0}
    for is_free, remain in page_runs(bitmap):
        color = shades[is_free][seen[is_free] % 2]
        seen[is_free] += 1

        while remain > 0:
            # a run longer than the rest of the line continues in the next one
            n = min(remain, pages_per_line - col)
            x = col * PAGE_W
            draw.rectangle([(x, y), (x + n*PAGE_W - 1, y + LINE_H - 1)], fill=color, outline=color)

            col += n
            remain -= n
            if col == pages_per_line:
                # the gap between lines stays black
                col = 0
                y += LINE_H + LINE_GAP

    return img

def save_bitmap_map(bitmap, page_size, prefix):
    fname = f"{prefix}_{page_size}.png"
    bitmap_image(bitmap).save(fname)
    return fname
