"""LabOps - dental lab manufacturing lifecycle service"""
