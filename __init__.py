"""
Bagged decision trees

Grows an ensemble of binary CART-style decision trees on bootstrap samples
and combines them by majority vote (classification) or mean (regression).

The modules live at the repository root: forest.py holds the ensemble,
tree_builder.py and splitter.py grow single trees, criteria.py scores splits,
bagging.py draws the random samples, and data_structures/ holds the dataset
and tree types.
"""
