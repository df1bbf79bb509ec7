"""Histogram based mutual information between two images.

Intensities are quantized into ``2**bitdepth`` equal width bins (two bins
for boolean images) and the mutual information is computed, in bits, from
the empirical marginal and joint distributions. ``mutual_information(x, x)``
is the entropy of ``x`` up to floating point error.

References:
    T. M. Cover and J. A. Thomas, "Entropy, Relative Entropy, and Mutual
        Information," in Elements of Information Theory, 2nd ed., 2006.
    F. Maes, D. Loeckx, D. Vandermeulen, and P. Suetens, "Image
        registration using mutual information," in Handbook of Biomedical
        Imaging, 2015, pp. 295-308.
"""
import logging
import numbers

import numpy as np
import scipy.stats
from skimage.exposure import rescale_intensity


log = logging.getLogger(__name__)


DEFAULT_BITDEPTH = 8

# The joint histogram holds 4**bitdepth cells
MAX_BITDEPTH = 12

# Cells whose joint or independence probability is at or below this value
# contribute nothing to the sum, i.e. 0 * log2(0) == 0
SINGULARITY_THRESHOLD = 1e-12


class InvalidInputError(ValueError):
    pass


class InvalidShapeError(InvalidInputError):
    pass


class InvalidValueError(InvalidInputError):
    pass


class InvalidParameterError(InvalidInputError):
    pass


def validate_bitdepth(bitdepth):
    '''Return bitdepth as an int, raise InvalidParameterError unless it is an
    integer in 1 .. MAX_BITDEPTH'''
    if isinstance(bitdepth, (bool, np.bool_)) \
            or not isinstance(bitdepth, numbers.Integral) \
            or bitdepth < 1:
        raise InvalidParameterError('bitdepth must be a positive integer, got %r' % (bitdepth,))
    if bitdepth > MAX_BITDEPTH:
        raise InvalidParameterError('bitdepth must be at most %d, got %d'
                                    % (MAX_BITDEPTH, bitdepth))
    return int(bitdepth)


def _check_samples(arr, name):
    if arr.dtype == np.bool_:
        return
    if not (np.issubdtype(arr.dtype, np.integer) or np.issubdtype(arr.dtype, np.floating)):
        raise InvalidValueError('%s must contain integer or boolean samples, got dtype %s'
                                % (name, arr.dtype))
    if np.issubdtype(arr.dtype, np.floating):
        if not np.isfinite(arr).all() or (arr != np.floor(arr)).any():
            raise InvalidValueError('%s contains non-integer samples' % name)
    if (arr < 0).any():
        raise InvalidValueError('%s contains negative samples' % name)


def _samples(image, name):
    '''Convert a single image to a flat array of its unmasked samples'''
    if np.ma.isMaskedArray(image):
        arr = image.compressed()
        if arr.size == 0 and image.size > 0:
            raise InvalidValueError('%s has no unmasked samples' % name)
    else:
        arr = np.asarray(image)
    if arr.size == 0:
        raise InvalidShapeError('%s must contain at least one sample' % name)
    _check_samples(arr, name)
    return arr


def validate(a, b, bitdepth=DEFAULT_BITDEPTH):
    """Check a pair of images before computing their mutual information

    Parameters
    ----------
    a, b : array_like
        Images of identical shape with non-negative integer samples, or
        boolean images. Masked arrays are accepted, a pair of samples is
        only kept when neither of them is masked.
    bitdepth : int
        Positive integer, checked even if the images are boolean

    Returns
    -------
    (a, b) : tuple of ndarray
        The validated images. When either input is masked, both are
        returned as flat arrays of the unmasked pairs.

    Raises
    ------
    InvalidShapeError, InvalidValueError, InvalidParameterError
    """
    validate_bitdepth(bitdepth)
    masked = np.ma.isMaskedArray(a) or np.ma.isMaskedArray(b)
    if masked:
        a, b = np.ma.asarray(a), np.ma.asarray(b)
    else:
        a, b = np.asarray(a), np.asarray(b)

    if a.shape != b.shape:
        raise InvalidShapeError('images must have the same shape, got %r and %r'
                                % (a.shape, b.shape))
    if a.size == 0:
        raise InvalidShapeError('images must contain at least one sample')

    if masked:
        keep = ~(np.ma.getmaskarray(a) | np.ma.getmaskarray(b))
        if not keep.any():
            raise InvalidValueError('images have no unmasked sample pairs')
        log.debug('Using %d of %d sample pairs, the rest are masked', keep.sum(), keep.size)
        a = np.ma.getdata(a)[keep]
        b = np.ma.getdata(b)[keep]

    if (a.dtype == np.bool_) != (b.dtype == np.bool_):
        raise InvalidValueError('images must both be boolean or both be integer valued, '
                                'got dtypes %s and %s' % (a.dtype, b.dtype))
    _check_samples(a, 'a')
    _check_samples(b, 'b')
    return a, b


def quantize(image, bitdepth=DEFAULT_BITDEPTH):
    """Map samples onto [0, 1] and return them with the number of bins

    Boolean images always use 2 bins. Unsigned integer images whose dtype
    is wider than bitdepth (uint16 at bitdepth 8) are scaled by the dtype
    range, the way skimage.util.img_as_ubyte converts them. Any other
    image is read on the 0 .. 2**bitdepth - 1 scale and divided by
    2**bitdepth - 1, samples above that saturate at 1.0. On that scale
    sample level k falls in bin k.

    Returns
    -------
    (values, nbins) : (ndarray of float, int)
    """
    image = np.asarray(image)
    if image.dtype == np.bool_:
        return image.astype(np.float64), 2

    nbins = 2 ** bitdepth
    if image.dtype.kind == 'u' and np.iinfo(image.dtype).bits > bitdepth:
        top = np.iinfo(image.dtype).max
        log.debug('Scaling %s samples by the dtype range onto %d bins', image.dtype, nbins)
    else:
        top = nbins - 1
        saturated = np.count_nonzero(image > top)
        if saturated:
            log.warning('%d samples are above the %d-bit range and saturate at %d',
                        saturated, bitdepth, top)
    values = rescale_intensity(image.astype(np.float64), in_range=(0, top), out_range=(0.0, 1.0))
    return values, nbins


def marginal_distribution(values, nbins):
    '''Probability of each of the nbins equal width bins over [0, 1]'''
    values = np.ravel(values)
    counts, _ = np.histogram(values, bins=nbins, range=(0.0, 1.0))
    return counts / float(values.size)


def joint_distribution(a_values, b_values, nbins):
    '''nbins x nbins joint probability, entry (i, j) is the fraction of pairs
    with a in bin i and b in bin j'''
    a_values = np.ravel(a_values)
    b_values = np.ravel(b_values)
    counts, _, _ = np.histogram2d(a_values, b_values, bins=nbins,
                                  range=((0.0, 1.0), (0.0, 1.0)))
    return counts / float(a_values.size)


def _mutual_information(pa, pb, pab):
    papb = np.outer(pa, pb)
    # Screen out singularities
    idx = (papb > SINGULARITY_THRESHOLD) & (pab > SINGULARITY_THRESHOLD)
    return float(np.sum(pab[idx] * np.log2(pab[idx] / papb[idx])))


def mutual_information(a, b, bitdepth=DEFAULT_BITDEPTH):
    """Mutual information, in bits, between two images of identical shape

    Parameters
    ----------
    a, b : array_like
        Images with non-negative integer samples on the
        0 .. 2**bitdepth - 1 scale, or boolean images
    bitdepth : int (default: 8)
        Number of bits per sample, the histograms use 2**bitdepth bins.
        Ignored for boolean images, which use 2 bins.

    Returns
    -------
    float
    """
    a, b = validate(a, b, bitdepth)
    bitdepth = int(bitdepth)
    a_values, nbins = quantize(a, bitdepth)
    b_values, _ = quantize(b, bitdepth)

    pa = marginal_distribution(a_values, nbins)
    pb = marginal_distribution(b_values, nbins)
    pab = joint_distribution(a_values, b_values, nbins)
    mi = _mutual_information(pa, pb, pab)
    log.debug('mutual information over %d samples and %d bins: %g', a_values.size, nbins, mi)
    return mi


def entropy(image, bitdepth=DEFAULT_BITDEPTH):
    '''Shannon entropy, in bits, of an image binned the same way as in
    mutual_information'''
    bitdepth = validate_bitdepth(bitdepth)
    values, nbins = quantize(_samples(image, 'image'), bitdepth)
    p = marginal_distribution(values, nbins)
    return float(scipy.stats.entropy(p, base=2))


class MutualInformationEstimator(object):
    '''Mutual information of image pairs at a fixed bit depth'''
    def __init__(self, bitdepth=DEFAULT_BITDEPTH):
        self.bitdepth = validate_bitdepth(bitdepth)

    @classmethod
    def from_config(cls, cfg):
        '''Create an estimator from a settings mapping (see imgmi.config)'''
        return cls(bitdepth=cfg['bitdepth'])

    def compute(self, a, b):
        return mutual_information(a, b, self.bitdepth)

    def entropy(self, image):
        return entropy(image, self.bitdepth)

    def __repr__(self):
        return 'MutualInformationEstimator(bitdepth=%d)' % self.bitdepth
